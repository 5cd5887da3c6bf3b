"""Tests for the key layout — shard folders, extensions, content types."""

from __future__ import annotations

import pytest

from formulastore.core.errors import InvalidDigestError, InvalidServiceError
from formulastore.core.key_scheme import (
    artifact_key,
    cache_key,
    content_type_of,
    extension_of,
    folder_of,
    formula_key,
    validate_service,
)
from formulastore.models.keys import KeyPurpose


class TestFolderOf:
    def test_two_level_shard(self):
        assert folder_of("ab12cd") == "ab/12"

    def test_minimum_length(self):
        assert folder_of("abcd") == "ab/cd"

    @pytest.mark.parametrize("digest", ["", "a", "abc"])
    def test_short_digest_is_fatal(self, digest: str):
        with pytest.raises(InvalidDigestError):
            folder_of(digest)

    @pytest.mark.parametrize("digest", ["../../etc", "ab/cdef", "abcd.ini", "ab cd"])
    def test_path_characters_rejected(self, digest: str):
        with pytest.raises(InvalidDigestError):
            folder_of(digest)

    def test_invalid_digest_is_a_value_error(self):
        with pytest.raises(ValueError):
            folder_of("ab")


class TestServiceMapping:
    def test_png(self):
        assert extension_of("png") == "png"
        assert content_type_of("png") == "image/png"

    def test_svg(self):
        assert extension_of("svg") == "svg"
        assert content_type_of("svg") == "image/svg+xml"

    def test_text_service_is_namespaced(self):
        assert extension_of("mathml") == "mathml.txt"
        assert content_type_of("mathml") == "text/plain"

    def test_service_match_is_exact(self):
        assert extension_of("PNG") == "PNG.txt"


class TestValidateService:
    @pytest.mark.parametrize("service", ["png", "mathml", "speech_en", "alt-text", "V2"])
    def test_accepts_plain_names(self, service: str):
        assert validate_service(service) == service

    @pytest.mark.parametrize(
        "service",
        ["", "../../formula/aa/bb/evil", "a/b", "..", "png.txt", "two words", "caf\u00e9"],
    )
    def test_rejects_path_and_punctuation(self, service: str):
        with pytest.raises(InvalidServiceError):
            validate_service(service)

    def test_invalid_service_is_a_value_error(self):
        with pytest.raises(ValueError):
            extension_of("")

    @pytest.mark.parametrize("func", [extension_of, content_type_of])
    def test_mapping_functions_validate(self, func):
        with pytest.raises(InvalidServiceError):
            func("../x")

    def test_cache_key_rejects_traversal(self, formula_digest: str):
        with pytest.raises(InvalidServiceError):
            cache_key(formula_digest, "../../../../../formula/aa/bb/evil")

    def test_cache_key_rejects_empty_service(self, formula_digest: str):
        with pytest.raises(InvalidServiceError):
            cache_key(formula_digest, "")


class TestKeys:
    def test_formula_key(self, formula_digest: str):
        assert formula_key(formula_digest) == (
            f"formula/2c/d3/{formula_digest}.ini"
        )

    def test_cache_key_png(self, formula_digest: str):
        assert cache_key(formula_digest, "png") == f"cache/2c/d3/{formula_digest}.png"

    def test_cache_key_text_service(self, formula_digest: str):
        assert cache_key(formula_digest, "speech") == (
            f"cache/2c/d3/{formula_digest}.speech.txt"
        )

    def test_text_services_do_not_collide(self):
        assert cache_key("abcdef", "mathml") != cache_key("abcdef", "speech")


class TestArtifactKey:
    def test_formula_artifact_key_matches_string_form(self, formula_digest: str):
        key = artifact_key(formula_digest, KeyPurpose.FORMULA)
        assert key.key == formula_key(formula_digest)
        assert key.content_type == "text/plain"
        assert key.service is None

    def test_cache_artifact_key_matches_string_form(self, formula_digest: str):
        key = artifact_key(formula_digest, "cache", "svg")
        assert key.key == cache_key(formula_digest, "svg")
        assert key.content_type == "image/svg+xml"
        assert key.folder == "2c/d3"

    def test_cache_key_requires_service(self, formula_digest: str):
        with pytest.raises(InvalidServiceError):
            artifact_key(formula_digest, KeyPurpose.CACHE)

    def test_artifact_key_is_frozen(self, formula_digest: str):
        key = artifact_key(formula_digest, KeyPurpose.FORMULA)
        with pytest.raises(Exception):
            key.digest = "other"  # type: ignore[misc]
