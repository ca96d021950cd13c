"""Tests for policy loading: parse, normalize, merge, validate."""

import json

from mutation_guard.services.policy_loader import (
    PolicyLoader,
    merge_with_defaults,
    normalize_keys,
)


class TestParsing:
    def test_empty_document_yields_defaults(self):
        result = PolicyLoader().parse_content("")
        assert result.success
        assert result.policy.project.name == "unnamed-project"
        assert result.policy.modification_rules.protected_directories == ["node_modules", ".git"]

    def test_yaml_document(self):
        doc = """
version: "2.0"
project:
  name: shop
  type: spa
techStack:
  forbiddenPackages: [left-pad]
"""
        result = PolicyLoader().parse_content(doc)
        assert result.success
        assert result.policy.version == "2.0"
        assert result.policy.tech_stack.forbidden_packages == ["left-pad"]
        # untouched siblings keep their defaults
        assert result.policy.tech_stack.framework == "react"

    def test_json_document(self):
        doc = json.dumps({"project": {"name": "api", "type": "service"}})
        result = PolicyLoader().parse_content(doc)
        assert result.success
        assert result.policy.project.name == "api"

    def test_unparseable_document(self):
        result = PolicyLoader().parse_content("project: [unclosed")
        assert not result.success
        assert len(result.errors) == 1

    def test_top_level_must_be_mapping(self):
        result = PolicyLoader().parse_content("- a\n- b\n")
        assert not result.success
        assert "mapping" in result.errors[0]


class TestNormalization:
    def test_alternate_spellings_normalize(self):
        normalized = normalize_keys(
            {
                "tech-stack": {"allowed-packages": ["react"]},
                "codeQuality": {"requireJsdoc": True, "maxFileLines": 10},
            }
        )
        assert normalized == {
            "tech_stack": {"allowed_packages": ["react"]},
            "code_quality": {"require_docstrings": True, "max_file_lines": 10},
        }

    def test_unknown_keys_pass_through(self):
        assert normalize_keys({"mystery": {"fooBar": 1}}) == {"mystery": {"fooBar": 1}}


class TestMerge:
    def test_arrays_replace_defaults(self):
        merged = merge_with_defaults({"modification_rules": {"protected_directories": ["secrets"]}})
        assert merged["modification_rules"]["protected_directories"] == ["secrets"]
        assert merged["modification_rules"]["protected_files"] == []

    def test_defaults_not_mutated(self):
        merge_with_defaults({"tech_stack": {"forbidden_packages": ["x"]}})
        assert PolicyLoader.default_policy().tech_stack.forbidden_packages == []


class TestValidation:
    def test_errors_are_pointer_qualified(self):
        result = PolicyLoader().parse_content("code_quality:\n  max_file_lines: -1\n")
        assert not result.success
        assert result.errors[0].startswith("/code_quality/max_file_lines:")

    def test_invalid_regex_rejected(self):
        result = PolicyLoader().parse_content("code_quality:\n  forbidden_patterns: ['eval(']\n")
        assert not result.success
        assert result.errors[0].startswith("/code_quality/forbidden_patterns:")

    def test_unknown_key_rejected(self):
        result = PolicyLoader().parse_content("project:\n  name: x\n  type: y\n  owner: me\n")
        assert not result.success
        assert any(e.startswith("/project/owner:") for e in result.errors)

    def test_module_boundary_from_alias(self):
        doc = "module_boundaries:\n  - from: 'src/ui/**'\n    cannot_import: ['../db/**']\n"
        result = PolicyLoader().parse_content(doc)
        assert result.success
        assert result.policy.module_boundaries[0].from_ == "src/ui/**"


class TestFiles:
    def test_find_policy_file(self, tmp_path):
        loader = PolicyLoader()
        assert loader.find_policy_file(tmp_path) is None

        (tmp_path / "sdd.yml").write_text("version: '1.1'\n")
        found = loader.find_policy_file(tmp_path)
        assert found == tmp_path / "sdd.yml"
        assert loader.parse_file(found).policy.version == "1.1"

    def test_missing_file_is_a_result(self, tmp_path):
        result = PolicyLoader().parse_file(tmp_path / "nope.yaml")
        assert not result.success
        assert "not found" in result.errors[0]

    def test_numeric_version_read_as_text(self):
        result = PolicyLoader().parse_content("version: 1.0\ntech_stack:\n  version: 18\n")
        assert result.success
        assert result.policy.version == "1.0"
        assert result.policy.tech_stack.version == "18"
