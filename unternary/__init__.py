"""Public package exports for the JavaScript conditional unfolder."""

from .decision_tree import DecisionTree, build_decision_tree
from .js_formatter import JsRenderOptions, JsWriter
from .js_frontend import SourceParseError, parse_expression, parse_source
from .report import UnfoldReport, UnfoldReporter, merge_reports
from .switch_synth import SWITCH_THRESHOLD, SwitchSynthesizer
from .transform import (
    ConditionalUnfolder,
    UnfoldOptions,
    UnfoldResult,
    rewrite_conditional_statement,
    rewrite_logical_statement,
    rewrite_return_argument,
    unfold_source,
)

__all__ = [
    "DecisionTree",
    "build_decision_tree",
    "JsRenderOptions",
    "JsWriter",
    "SourceParseError",
    "parse_expression",
    "parse_source",
    "UnfoldReport",
    "UnfoldReporter",
    "merge_reports",
    "SWITCH_THRESHOLD",
    "SwitchSynthesizer",
    "ConditionalUnfolder",
    "UnfoldOptions",
    "UnfoldResult",
    "rewrite_conditional_statement",
    "rewrite_logical_statement",
    "rewrite_return_argument",
    "unfold_source",
]
