# application/commands/reports.py
from typing import List, Tuple

from ollama_assistant.core.domain.models import (
    CommandSpec,
    Component,
    Diagnostic,
    InspectionReport,
    ModelDescriptor,
    PackageDependency,
)

SearchHit = Tuple[str, int, str]


def format_suggestions(specs: List[CommandSpec]) -> str:
    suggestions = "Available Commands:\n\n"
    for spec in specs:
        suggestions += f"{spec.sigil}\n"
    suggestions += "\nType @help for detailed information about each command."
    return suggestions


def format_help(specs: List[CommandSpec]) -> str:
    lines = ["Available commands:"]
    for spec in specs:
        lines.append(f"{spec.usage or spec.sigil} - {spec.description}")
    return "\n".join(lines)


def format_models(models: List[ModelDescriptor]) -> str:
    return "Available models:\n" + "\n".join(f"- {m.name} ({m.size})" for m in models)


def format_analysis(path: str, report: InspectionReport, diagnostics: List[Diagnostic]) -> str:
    analysis = f"Code Analysis for {path}:\n\n"
    analysis += "📊 File Statistics:\n"
    analysis += f"- Total lines: {report.statistics.total_lines}\n"
    analysis += f"- Non-empty lines: {report.statistics.non_empty_lines}\n"

    if diagnostics:
        analysis += "\n⚠️ Issues Found:\n"
        for diagnostic in diagnostics:
            analysis += f"- Line {diagnostic.line}: {diagnostic.message}\n"
            if diagnostic.severity == "error":
                analysis += f"  Error: {diagnostic.message}\n"
            elif diagnostic.severity == "warning":
                analysis += f"  Warning: {diagnostic.message}\n"
    else:
        analysis += "\n✅ No issues found in the code.\n"
    return analysis


def format_explanation(path: str, report: InspectionReport, diagnostics: List[Diagnostic],
                       high_complexity: int = 10) -> str:
    explanation = f"📝 Code Explanation for {path}:\n\n"
    explanation += "📊 File Overview:\n"
    explanation += f"- Total lines: {report.statistics.total_lines}\n"
    explanation += f"- Non-empty lines: {report.statistics.non_empty_lines}\n"

    explanation += "\n🔍 Code Structure:\n"
    explanation += f"- Imports: {len(report.imports)}\n"
    explanation += f"- Functions: {len(report.functions)}\n"
    explanation += f"- Classes: {len(report.classes)}\n"

    if diagnostics:
        explanation += "\n⚠️ Issues Found:\n"
        for diagnostic in diagnostics:
            explanation += f"- Line {diagnostic.line}: {diagnostic.message}\n"

    explanation += "\n📈 Code Complexity:\n"
    explanation += f"- Cyclomatic complexity: {report.complexity}\n"
    if report.complexity > high_complexity:
        explanation += "  ⚠️ High complexity detected\n"
    else:
        explanation += "  ✅ Good complexity level\n"
    return explanation


def format_refactoring(path: str, long_functions: List[Tuple[str, int]], complex_functions: List[Tuple[str, int]],
                       report: InspectionReport) -> str:
    header = f"🔄 Refactoring Suggestions for {path}:\n\n"
    suggestions = header

    if long_functions:
        suggestions += "⚠️ Long Functions Found:\n"
        for name, lines in long_functions:
            suggestions += f"- {name} ({lines} lines)\n"
            suggestions += "  Consider breaking this function into smaller, more focused functions.\n"
        suggestions += "\n"

    if complex_functions:
        suggestions += "⚠️ Complex Functions Found:\n"
        for name, score in complex_functions:
            suggestions += f"- {name} (complexity: {score})\n"
            suggestions += "  Consider simplifying the logic or extracting complex conditions.\n"
        suggestions += "\n"

    if report.duplicates:
        suggestions += "⚠️ Potential Code Duplication:\n"
        for window in report.duplicates:
            suggestions += f"- Similar code found in lines {window.start_line}-{window.end_line}\n"
            suggestions += "  Consider extracting this into a reusable function.\n"
        suggestions += "\n"

    if report.naming_issues:
        suggestions += "⚠️ Naming Convention Issues:\n"
        for issue in report.naming_issues:
            suggestions += f"- {issue}\n"
        suggestions += "\n"

    if suggestions == header:
        suggestions += "✅ No major refactoring suggestions found. The code looks well-structured.\n"
    return suggestions


def format_dependencies(path: str, imports: List[str], unused: List[str],
                        packages: List[PackageDependency]) -> str:
    analysis = f"📦 Dependency Analysis for {path}:\n\n"

    analysis += "🔍 Imports:\n"
    for imp in imports:
        analysis += f"- {imp}\n"
    analysis += "\n"

    if unused:
        analysis += "⚠️ Unused Imports:\n"
        for imp in unused:
            analysis += f"- {imp}\n"
        analysis += "\n"

    if packages:
        analysis += "📦 Package Dependencies:\n"
        for dep in packages:
            analysis += f"- {dep.name}: {dep.version}\n"
    return analysis


def format_outline(path: str, purpose: str, components: List[Component], flow: str,
                   relationships: str, issues: List[str]) -> str:
    understanding = f"🧠 Code Understanding for {path}:\n\n"

    understanding += "🎯 File Purpose:\n"
    understanding += purpose + "\n\n"

    understanding += "🔑 Key Components:\n"
    for component in components:
        understanding += f"- {component.name} ({component.kind})\n"
        understanding += f"  {component.description}\n"
    understanding += "\n"

    understanding += "🔄 Code Flow:\n"
    understanding += flow + "\n"

    understanding += "🔗 Dependencies and Relationships:\n"
    understanding += relationships + "\n\n"

    understanding += "⚠️ Potential Issues:\n"
    for issue in issues:
        understanding += f"- {issue}\n"
    return understanding


def format_search_results(hits: List[SearchHit]) -> str:
    if not hits:
        return "No matches found for your search query."

    results = "🔍 Search Results:\n\n"
    for path, line_number, line in hits:
        results += f"📄 {path}:{line_number}\n{line}\n\n"
    results += f"Found {len(hits)} matches."
    return results
