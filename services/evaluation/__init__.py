"""Offline evaluation harness for housing search quality."""

from services.evaluation.harness import DEFAULT_CASES, EvaluationCase, EvaluationReport, run_evaluation

__all__ = ["DEFAULT_CASES", "EvaluationCase", "EvaluationReport", "run_evaluation"]
