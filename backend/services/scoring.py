"""Deterministic, rule-based repository scoring.

No LLM involvement: every point comes from README length thresholds or
file-path membership checks against the tables in ``ScoringRules``.

Categories (max points):
    documentation         25
    structure             25
    completeness          20
    engineering_maturity  30
"""

from pydantic import BaseModel, ConfigDict

from models.responses import ScoreBreakdown, Scorecard

# README length thresholds, each worth +5 on top of the +10 for existing
README_LENGTH_THRESHOLDS = (500, 2000, 5000)

# File count thresholds, each worth +5
FILE_COUNT_THRESHOLDS = (5, 20, 50)


class ScoringRules(BaseModel):
    model_config = ConfigDict(frozen=True)

    dependency_files: frozenset[str] = frozenset({
        "package.json",
        "requirements.txt",
        "pyproject.toml",
        "Cargo.toml",
        "go.mod",
        "pom.xml",
        "build.gradle",
        "Gemfile",
        "composer.json",
    })
    test_path_markers: tuple[str, ...] = (
        "/test/",
        "/tests/",
        "/__tests__/",
        ".test.",
        ".spec.",
        "_test.",
    )
    test_name_prefixes: tuple[str, ...] = ("test_",)
    test_name_suffixes: tuple[str, ...] = ("Test.java", "Test.kt")
    ci_prefixes: tuple[str, ...] = (".github/workflows/",)
    ci_files: frozenset[str] = frozenset({
        ".gitlab-ci.yml",
        ".travis.yml",
        "circle.yml",
        ".circleci/config.yml",
        "Jenkinsfile",
        "azure-pipelines.yml",
    })
    config_example_files: frozenset[str] = frozenset({
        ".env.example",
        "config.example.json",
        "config.example.yml",
    })
    config_example_marker: str = ".example"
    # Compared upper-cased
    license_files: frozenset[str] = frozenset({"LICENSE", "LICENSE.MD", "LICENSE.TXT"})
    contributing_files: frozenset[str] = frozenset({
        "CONTRIBUTING.MD",
        "CHANGELOG.MD",
        "CHANGELOG.TXT",
    })


DEFAULT_RULES = ScoringRules()


def calculate_score(
    readme: str,
    files: list[str],
    rules: ScoringRules = DEFAULT_RULES,
) -> Scorecard:
    """Score a repository from its README text and blob paths. Returns 0-100."""
    breakdown = ScoreBreakdown(
        documentation=documentation_score(readme),
        structure=structure_score(files, rules),
        completeness=completeness_score(files, rules),
        engineering_maturity=engineering_maturity_score(files, rules),
    )
    overall = (
        breakdown.documentation
        + breakdown.structure
        + breakdown.completeness
        + breakdown.engineering_maturity
    )
    return Scorecard(overall=overall, breakdown=breakdown)


def documentation_score(readme: str) -> int:
    if not readme:
        return 0
    score = 10
    for threshold in README_LENGTH_THRESHOLDS:
        if len(readme) > threshold:
            score += 5
    return score


def structure_score(files: list[str], rules: ScoringRules = DEFAULT_RULES) -> int:
    score = sum(5 for threshold in FILE_COUNT_THRESHOLDS if len(files) > threshold)
    if any(f in rules.dependency_files for f in files):
        score += 10
    return score


def is_test_file(path: str, rules: ScoringRules = DEFAULT_RULES) -> bool:
    # Leading slash so top-level test directories match the same markers
    rooted = "/" + path
    if any(marker in rooted for marker in rules.test_path_markers):
        return True
    basename = path.rsplit("/", 1)[-1]
    if basename.startswith(rules.test_name_prefixes):
        return True
    return path.endswith(rules.test_name_suffixes)


def completeness_score(files: list[str], rules: ScoringRules = DEFAULT_RULES) -> int:
    test_count = sum(1 for f in files if is_test_file(f, rules))
    score = 0
    if test_count > 0:
        score += 10
    if test_count > 3:
        score += 10
    return score


def has_ci_config(files: list[str], rules: ScoringRules = DEFAULT_RULES) -> bool:
    return any(
        f.startswith(rules.ci_prefixes) or f in rules.ci_files
        for f in files
    )


def has_config_example(files: list[str], rules: ScoringRules = DEFAULT_RULES) -> bool:
    return any(
        f in rules.config_example_files or rules.config_example_marker in f
        for f in files
    )


def has_license(files: list[str], rules: ScoringRules = DEFAULT_RULES) -> bool:
    return any(f.upper() in rules.license_files for f in files)


def has_contributing_docs(files: list[str], rules: ScoringRules = DEFAULT_RULES) -> bool:
    return any(f.upper() in rules.contributing_files for f in files)


def engineering_maturity_score(files: list[str], rules: ScoringRules = DEFAULT_RULES) -> int:
    score = 0
    if has_ci_config(files, rules):
        score += 15
    if has_config_example(files, rules):
        score += 5
    if has_license(files, rules):
        score += 5
    if has_contributing_docs(files, rules):
        score += 5
    return score
