"""Unit tests for query classification and ranking."""

from dataclasses import replace

import pytest

from package_docs_search.parsing.doc_comment import build_chunks
from package_docs_search.search.engine import DEFAULT_TYPE_ENGINE
from package_docs_search.search.ranker import QueryKind, classify_query, rank
from package_docs_search.search.types import Var
from tests.fixtures.docs_payloads import make_module


@pytest.fixture
def chunks():
    module = make_module(
        "List",
        "List functions\n@docs map, filter, foldl, length, member, mapAccum",
        map="(a -> b) -> List a -> List b",
        filter="(a -> Bool) -> List a -> List a",
        foldl="(a -> b -> b) -> b -> List a -> b",
        length="List a -> Int",
        member="a -> List a -> Bool",
        mapAccum="(a -> b -> ( b, c )) -> b -> List a -> ( b, List c )",
    )
    return build_chunks("elm/core/1.0.5", module)


class TestClassifyQuery:
    def test_bare_word_is_a_name_query(self):
        kind, tipe = classify_query("map")

        assert kind is QueryKind.NAME
        assert tipe == Var("a")

    def test_free_text_is_a_name_query(self):
        assert classify_query("map over list")[0] is QueryKind.NAME

    def test_signature_is_a_type_query(self):
        assert classify_query("List a -> Int")[0] is QueryKind.TYPE

    def test_bare_constructor_is_a_type_query(self):
        assert classify_query("Bool")[0] is QueryKind.TYPE


class TestRank:
    def test_name_query_orders_by_score(self, chunks):
        results = rank("map", chunks)

        assert [r.chunk.name.local for r in results] == ["map", "mapAccum"]
        assert [r.score for r in results] == sorted(r.score for r in results)

    def test_type_query(self, chunks):
        results = rank("(x -> y) -> List x -> List y", chunks)

        assert results[0].chunk.name.local == "map"
        assert results[0].score == 0.0

    def test_type_query_scores_against_normalized_entries(self, chunks):
        results = rank("List elem -> Int", chunks)

        assert [r.chunk.name.local for r in results] == ["length"]

    def test_no_match_is_empty(self, chunks):
        assert rank("Html msg -> Svg msg", chunks) == []
        assert rank("zzzzzz", chunks) == []

    def test_empty_chunk_list(self):
        assert rank("map", []) == []

    def test_ties_keep_index_order(self, chunks):
        duplicated = chunks + [replace(chunk, package_identifier="elm/core/1.0.4") for chunk in chunks]

        results = rank("map", duplicated)

        assert [(r.chunk.name.local, r.chunk.package_identifier) for r in results] == [
            ("map", "elm/core/1.0.5"),
            ("map", "elm/core/1.0.4"),
            ("mapAccum", "elm/core/1.0.5"),
            ("mapAccum", "elm/core/1.0.4"),
        ]

    def test_everything_kept_is_within_the_low_penalty(self, chunks):
        for query in ["a", "List a -> b", "fold", "member"]:
            assert all(r.score <= DEFAULT_TYPE_ENGINE.low_penalty for r in rank(query, chunks))

    def test_reuses_an_existing_classification(self, chunks):
        parsed = []

        def counting_parse(text):
            parsed.append(text)
            return DEFAULT_TYPE_ENGINE.parse_type(text)

        engine = replace(DEFAULT_TYPE_ENGINE, parse_type=counting_parse)
        classified = classify_query("map", engine)

        results = rank("map", chunks, engine, classified=classified)

        assert parsed == ["map"]
        assert [r.chunk.name.local for r in results] == ["map", "mapAccum"]
