"""Tests for the constraint validator."""

import pytest

from mutation_guard.models.mutation import (
    ApplyPatch,
    CreateFile,
    InstallDependency,
    MoveFile,
    WriteFile,
    parse_mutation,
)
from mutation_guard.services.constraint_validator import ConstraintValidator, validate_mutation
from mutation_guard.services.pathmatch import glob_match

POLICY = """
project:
  name: shop
  type: spa
techStack:
  forbiddenPackages: [left-pad, moment]
directoryStructure:
  src/services:
    maxLines: 2
    forbidden: [console.log]
moduleBoundaries:
  - from: "src/components/**"
    canImport: ["../hooks/**", "../utils/**"]
    cannotImport: ["**/api/**"]
codeQuality:
  forbiddenPatterns: ['eval\\(']
modificationRules:
  protectedFiles: [package.json]
  protectedDirectories: [secrets/, .git]
  requireApproval:
    - pattern: "src/config/**"
      reason: Config change
"""


@pytest.fixture
def policy(make_policy):
    return make_policy(POLICY)


def rules(outcome):
    return [v.rule for v in outcome.violations]


class TestGlobMatch:
    def test_single_star_stays_in_segment(self):
        assert glob_match("src/a.ts", "src/*.ts")
        assert not glob_match("src/deep/a.ts", "src/*.ts")

    def test_double_star_crosses_segments(self):
        assert glob_match("src/deep/a.ts", "src/**/*.ts")
        assert glob_match("src/a.ts", "src/**/*.ts")

    def test_braces_and_classes(self):
        assert glob_match("src/a.tsx", "src/*.{ts,tsx}")
        assert glob_match("v1.txt", "v[0-9].txt")
        assert not glob_match("va.txt", "v[!a-z].txt")

    def test_backslashes_normalized(self):
        assert glob_match("src\\config\\app.ts", "src/config/**")


class TestPathProtection:
    def test_protected_directory_blocks(self, policy):
        outcome = validate_mutation(policy, WriteFile(target_path="secrets/api-key.txt", content="x"))
        assert not outcome.valid
        assert rules(outcome) == ["protected_directory"]
        assert outcome.violations[0].severity == "error"

    def test_approval_without_errors(self, policy):
        outcome = validate_mutation(policy, WriteFile(target_path="src/config/app.ts", content="export {};"))
        assert outcome.valid
        assert outcome.requires_approval
        assert outcome.approval_reasons == ["Config change (pattern: src/config/**)"]

    def test_protected_file_whole_name(self, policy):
        assert not validate_mutation(policy, WriteFile(target_path="package.json")).valid
        assert not validate_mutation(policy, WriteFile(target_path="./web/package.json")).valid
        assert validate_mutation(policy, WriteFile(target_path="mypackage.json")).valid

    def test_dot_segments_cannot_hide_protected_paths(self, policy):
        outcome = validate_mutation(policy, WriteFile(target_path="src/../secrets/keys.txt", content="k"))
        assert not outcome.valid
        assert rules(outcome) == ["protected_directory"]

        outcome = validate_mutation(policy, WriteFile(target_path="./src/./../package.json"))
        assert rules(outcome) == ["protected_file"]

    def test_move_checks_source(self, policy):
        outcome = validate_mutation(policy, MoveFile(source_path=".git/config", target_path="config.bak"))
        assert not outcome.valid
        assert rules(outcome) == ["protected_directory"]


class TestImportsAndDependencies:
    def test_only_the_forbidden_dependency_is_flagged(self, make_policy):
        policy = make_policy("tech_stack:\n  forbidden_packages: [left-pad]\n")
        outcome = validate_mutation(policy, InstallDependency(dependencies=["left-pad", "react"]))
        assert not outcome.valid
        assert len(outcome.violations) == 1
        assert outcome.violations[0].rule == "forbidden_package"
        assert "react" not in outcome.violations[0].message

    def test_forbidden_dependency(self, policy):
        outcome = validate_mutation(policy, InstallDependency(dependencies=["left-pad"]))
        assert not outcome.valid
        assert len(outcome.errors) == 1
        assert outcome.errors[0].rule == "forbidden_package"
        assert "left-pad" in outcome.errors[0].message

    def test_unlisted_dependency_warns_only_with_allow_list(self, make_policy):
        policy = make_policy("tech_stack:\n  allowed_packages: [react]\n")
        outcome = validate_mutation(policy, InstallDependency(dependencies=["react", "lodash"]))
        assert outcome.valid
        assert rules(outcome) == ["unlisted_package"]

    def test_cannot_import_from_content(self, policy):
        content = "import { get } from '../api/client';\nimport React from 'react';\n"
        outcome = validate_mutation(policy, CreateFile(target_path="src/components/Cart.tsx", content=content))
        assert not outcome.valid
        assert set(rules(outcome)) == {"module_boundary"}
        assert len(outcome.errors) == 1
        assert "../api/client" in outcome.errors[0].message

    def test_relative_import_outside_allow_list_warns(self, policy):
        mutation = ApplyPatch(target_path="src/components/Cart.tsx", imports=["./styles", "react", "../hooks/useCart"])
        outcome = validate_mutation(policy, mutation)
        assert outcome.valid
        assert len(outcome.warnings) == 1
        assert "./styles" in outcome.warnings[0].message

    def test_boundary_only_applies_to_matching_files(self, policy):
        mutation = ApplyPatch(target_path="src/pages/Home.tsx", imports=["../api/client"])
        assert validate_mutation(policy, mutation).violations == []


class TestCodeQuality:
    def test_eval_call_flagged_once(self, make_policy):
        policy = make_policy("code_quality:\n  forbidden_patterns: ['eval\\(']\n")
        outcome = validate_mutation(policy, WriteFile(target_path="a.js", content="const x = eval(y)"))
        assert len(outcome.errors) == 1
        assert outcome.errors[0].line == 1
        assert outcome.errors[0].matched == "eval("

    def test_forbidden_pattern_reports_line_and_match(self, policy):
        outcome = validate_mutation(policy, WriteFile(target_path="src/x.ts", content="eval(userInput);\n"))
        assert not outcome.valid
        assert len(outcome.errors) == 1
        error = outcome.errors[0]
        assert error.rule == "forbidden_pattern"
        assert error.line == 1
        assert error.matched == "eval("
        assert error.location == "src/x.ts:1"

    def test_file_length_warning(self, make_policy):
        policy = make_policy("code_quality:\n  max_file_lines: 2\n")
        outcome = validate_mutation(policy, WriteFile(target_path="a.ts", content="a\nb\nc\n"))
        assert outcome.valid
        assert rules(outcome) == ["max_file_lines"]


class TestNamingAndDirectories:
    def test_component_name(self, policy):
        outcome = validate_mutation(policy, CreateFile(target_path="src/components/cart-item.tsx"))
        assert rules(outcome) == ["naming_convention"]
        assert outcome.violations[0].suggestion == "Rename to CartItem.tsx"

    def test_hook_prefix(self, policy):
        outcome = validate_mutation(policy, CreateFile(target_path="src/hooks/cart.ts"))
        assert outcome.violations[0].suggestion == "Rename to useCart.ts"

    def test_utils_camel_case(self, policy):
        outcome = validate_mutation(policy, CreateFile(target_path="src/utils/FormatPrice.ts"))
        assert outcome.violations[0].suggestion == "Rename to formatPrice.ts"

    def test_directory_rules(self, policy):
        content = "a\nconsole.log(a)\nb\n"
        outcome = validate_mutation(policy, WriteFile(target_path="src/services/api.ts", content=content))
        assert outcome.valid
        assert sorted(rules(outcome)) == ["directory_forbidden", "directory_max_lines"]


class TestEntryPoints:
    def test_validator_holder(self, policy):
        validator = ConstraintValidator(policy)
        assert validator.validate(parse_mutation({"type": "read_file", "target_path": "README.md"})).valid

    def test_validation_is_pure(self, policy):
        mutation = WriteFile(target_path="secrets/a", content="eval(1)")
        assert validate_mutation(policy, mutation) == validate_mutation(policy, mutation)
