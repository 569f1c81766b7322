"""Catalog of the rules understood by swift-format."""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

_RULE_NAMES: Tuple[str, ...] = (
    "AllPublicDeclarationsHaveDocumentation",
    "AlwaysUseLowerCamelCase",
    "AmbiguousTrailingClosureOverload",
    "BeginDocumentationCommentWithOneLineSummary",
    "DoNotUseSemicolons",
    "DontRepeatTypeInStaticProperties",
    "FileScopedDeclarationPrivacy",
    "FullyIndirectEnum",
    "GroupNumericLiterals",
    "IdentifiersMustBeASCII",
    "NeverForceUnwrap",
    "NeverUseForceTry",
    "NeverUseImplicitlyUnwrappedOptionals",
    "NoAccessLevelOnExtensionDeclaration",
    "NoBlockComments",
    "NoCasesWithOnlyFallthrough",
    "NoEmptyTrailingClosureParentheses",
    "NoLabelsInCasePatterns",
    "NoLeadingUnderscores",
    "NoParensAroundConditions",
    "NoVoidReturnOnFunctionSignature",
    "OneCasePerLine",
    "OneVariableDeclarationPerLine",
    "OnlyOneTrailingClosureArgument",
    "OrderedImports",
    "ReturnVoidInsteadOfEmptyTuple",
    "UseEarlyExits",
    "UseLetInEveryBoundCaseVariable",
    "UseShorthandTypeNames",
    "UseSingleLinePropertyGetter",
    "UseSynthesizedInitializer",
    "UseTripleSlashForDocumentationComments",
    "UseWhereClausesInForLoops",
    "ValidateDocumentationComments",
)

_DISABLED_BY_DEFAULT = {
    "AllPublicDeclarationsHaveDocumentation",
    "BeginDocumentationCommentWithOneLineSummary",
    "NeverForceUnwrap",
    "NeverUseForceTry",
    "NeverUseImplicitlyUnwrappedOptionals",
    "NoLeadingUnderscores",
    "UseEarlyExits",
    "UseWhereClausesInForLoops",
}

# Rules that rewrite source when running `swift-format format`; the remaining
# rules only produce lint diagnostics.
FORMATTER_RULE_KEYS: Tuple[str, ...] = (
    "DoNotUseSemicolons",
    "FileScopedDeclarationPrivacy",
    "FullyIndirectEnum",
    "GroupNumericLiterals",
    "NoAccessLevelOnExtensionDeclaration",
    "NoCasesWithOnlyFallthrough",
    "NoEmptyTrailingClosureParentheses",
    "NoLabelsInCasePatterns",
    "NoParensAroundConditions",
    "NoVoidReturnOnFunctionSignature",
    "OneCasePerLine",
    "OneVariableDeclarationPerLine",
    "OrderedImports",
    "ReturnVoidInsteadOfEmptyTuple",
    "UseEarlyExits",
    "UseShorthandTypeNames",
    "UseSingleLinePropertyGetter",
    "UseTripleSlashForDocumentationComments",
    "UseWhereClausesInForLoops",
)

RULES: Mapping[str, Optional[bool]] = MappingProxyType({name: None for name in _RULE_NAMES})

DEFAULT_RULES: Mapping[str, bool] = MappingProxyType(
    {name: name not in _DISABLED_BY_DEFAULT for name in _RULE_NAMES}
)

_CAMEL_BOUNDARY = re.compile(r"((?<=[a-z])[A-Z]|(?<!^)[A-Z](?=[a-z]))")


def formatter_rule_defaults() -> Dict[str, bool]:
    """Default values of the user-configurable formatter rules, in catalog order."""

    return {name: DEFAULT_RULES[name] for name in RULES if name in FORMATTER_RULE_KEYS}


def rule_default(name: str) -> bool:
    return DEFAULT_RULES.get(name, False)


def is_formatter_rule(name: str) -> bool:
    return name in FORMATTER_RULE_KEYS


def describe_rule(name: str) -> str:
    """Turn ``NoParensAroundConditions`` into ``No parens around conditions``.

    Acronyms such as ``ASCII`` keep their case.
    """

    words = _CAMEL_BOUNDARY.sub(r" \1", name).split(" ")
    label = " ".join(word if word == word.upper() else word.lower() for word in words)
    return label[:1].upper() + label[1:]


__all__ = [
    "DEFAULT_RULES",
    "FORMATTER_RULE_KEYS",
    "RULES",
    "describe_rule",
    "formatter_rule_defaults",
    "is_formatter_rule",
    "rule_default",
]
