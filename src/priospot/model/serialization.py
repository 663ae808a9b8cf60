"""Canonical JSON and legacy XML serialization.

The JSON form uses camelCase keys and omits ``None`` values. Metrics are
written with their ``kind`` tag and read back through ``metric_from_dict``.
The legacy XML form only carries project, file and metric data.
"""

from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape as _sax_escape

from ..exceptions import ReportParseError
from .coverage import (
    CoverageClass,
    CoverageCounter,
    CoverageDocument,
    CoverageFile,
    CoverageMethod,
)
from .metrics import Metric, metric_from_dict
from .project import (
    ClassEntry,
    ClassFlags,
    FileEntry,
    MethodEntry,
    PackageEntry,
    Position,
    PriospotDocument,
    Project,
    SupplementDeclaration,
)

# ── Project document ─────────────────────────────────────────────────


def _metrics_to_list(metrics) -> List[Dict[str, Any]]:
    return [m.to_dict() for m in metrics]


def _metrics_from_list(items: Optional[List[Dict[str, Any]]]) -> tuple:
    return tuple(metric_from_dict(item) for item in items or [])


def _position_to_dict(position: Position) -> Dict[str, int]:
    return {"line": position.line, "column": position.column}


def _position_from_dict(data: Optional[Dict[str, Any]]) -> Position:
    data = data or {}
    return Position(line=int(data.get("line", 0)), column=int(data.get("column", 0)))


def _method_to_dict(method: MethodEntry) -> Dict[str, Any]:
    return {
        "name": method.name,
        "fullyQualifiedName": method.fully_qualified_name,
        "position": _position_to_dict(method.position),
        "isConstructor": method.is_constructor,
        "isAbstract": method.is_abstract,
        "metrics": _metrics_to_list(method.metrics),
    }


def _method_from_dict(data: Dict[str, Any]) -> MethodEntry:
    return MethodEntry(
        name=data["name"],
        fully_qualified_name=data.get("fullyQualifiedName", data["name"]),
        position=_position_from_dict(data.get("position")),
        is_constructor=bool(data.get("isConstructor", False)),
        is_abstract=bool(data.get("isAbstract", False)),
        metrics=_metrics_from_list(data.get("metrics")),
    )


def _class_to_dict(entry: ClassEntry) -> Dict[str, Any]:
    return {
        "name": entry.name,
        "fullyQualifiedName": entry.fully_qualified_name,
        "position": _position_to_dict(entry.position),
        "flags": {
            "isAbstract": entry.flags.is_abstract,
            "isInterface": entry.flags.is_interface,
            "isEnum": entry.flags.is_enum,
            "isStatic": entry.flags.is_static,
        },
        "metrics": _metrics_to_list(entry.metrics),
        "methods": [_method_to_dict(m) for m in entry.methods],
    }


def _class_from_dict(data: Dict[str, Any]) -> ClassEntry:
    flags = data.get("flags") or {}
    return ClassEntry(
        name=data["name"],
        fully_qualified_name=data.get("fullyQualifiedName", data["name"]),
        position=_position_from_dict(data.get("position")),
        flags=ClassFlags(
            is_abstract=bool(flags.get("isAbstract", False)),
            is_interface=bool(flags.get("isInterface", False)),
            is_enum=bool(flags.get("isEnum", False)),
            is_static=bool(flags.get("isStatic", False)),
        ),
        metrics=_metrics_from_list(data.get("metrics")),
        methods=tuple(_method_from_dict(m) for m in data.get("methods") or []),
    )


def file_to_dict(entry: FileEntry) -> Dict[str, Any]:
    return {
        "name": entry.name,
        "path": entry.path,
        "metrics": _metrics_to_list(entry.metrics),
        "classes": [_class_to_dict(c) for c in entry.classes],
    }


def file_from_dict(data: Dict[str, Any]) -> FileEntry:
    return FileEntry(
        name=data["name"],
        path=data["path"],
        metrics=_metrics_from_list(data.get("metrics")),
        classes=tuple(_class_from_dict(c) for c in data.get("classes") or []),
    )


def project_to_dict(project: Project) -> Dict[str, Any]:
    data: Dict[str, Any] = {"name": project.name}
    if project.version is not None:
        data["version"] = project.version
    data["basePath"] = project.base_path
    data["metrics"] = _metrics_to_list(project.metrics)
    data["files"] = [file_to_dict(f) for f in project.files]
    data["supplements"] = [
        {"name": s.name, "description": s.description} for s in project.supplements
    ]
    data["packages"] = [
        {
            "name": p.name,
            "metrics": _metrics_to_list(p.metrics),
            "files": [file_to_dict(f) for f in p.files],
        }
        for p in project.packages
    ]
    return data


def project_from_dict(data: Dict[str, Any]) -> Project:
    return Project(
        name=data["name"],
        version=data.get("version"),
        base_path=data.get("basePath", ""),
        metrics=_metrics_from_list(data.get("metrics")),
        files=tuple(file_from_dict(f) for f in data.get("files") or []),
        supplements=tuple(
            SupplementDeclaration(name=s["name"], description=s.get("description", ""))
            for s in data.get("supplements") or []
        ),
        packages=tuple(
            PackageEntry(
                name=p["name"],
                metrics=_metrics_from_list(p.get("metrics")),
                files=tuple(file_from_dict(f) for f in p.get("files") or []),
            )
            for p in data.get("packages") or []
        ),
    )


def document_to_dict(document: PriospotDocument) -> Dict[str, Any]:
    return {
        "schemaVersion": document.schema_version,
        "generatedAt": document.generated_at,
        "project": project_to_dict(document.project),
    }


def document_from_dict(data: Dict[str, Any]) -> PriospotDocument:
    return PriospotDocument(
        schema_version=int(data.get("schemaVersion", 1)),
        generated_at=data.get("generatedAt", ""),
        project=project_from_dict(data["project"]),
    )


def dumps_document(document: PriospotDocument) -> str:
    return json.dumps(document_to_dict(document), indent=2)


def loads_document(text: str) -> PriospotDocument:
    return document_from_dict(json.loads(text))


def write_document(document: PriospotDocument, output_path: Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(dumps_document(document), encoding="utf-8")
    return output_path


def read_document(input_path: Path) -> PriospotDocument:
    input_path = Path(input_path)
    try:
        return loads_document(input_path.read_text(encoding="utf-8"))
    except (ValueError, KeyError, TypeError) as e:
        raise ReportParseError(input_path, str(e))


# ── Coverage document ────────────────────────────────────────────────


def _counter_to_dict(counter: CoverageCounter) -> Dict[str, int]:
    return {"covered": counter.covered, "total": counter.total}


def _counter_from_dict(data: Optional[Dict[str, Any]]) -> Optional[CoverageCounter]:
    if data is None:
        return None
    return CoverageCounter(covered=int(data["covered"]), total=int(data["total"]))


def _without_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def coverage_document_to_dict(document: CoverageDocument) -> Dict[str, Any]:
    files = []
    for f in document.files:
        classes = []
        for c in f.classes:
            methods = [
                _without_none(
                    {
                        "name": m.name,
                        "signature": m.signature,
                        "lineCoverage": _counter_to_dict(m.line_coverage) if m.line_coverage else None,
                        "branchCoverage": _counter_to_dict(m.branch_coverage) if m.branch_coverage else None,
                    }
                )
                for m in c.methods
            ]
            classes.append(
                _without_none(
                    {
                        "name": c.name,
                        "lineCoverage": _counter_to_dict(c.line_coverage) if c.line_coverage else None,
                        "branchCoverage": _counter_to_dict(c.branch_coverage) if c.branch_coverage else None,
                        "methods": methods,
                    }
                )
            )
        files.append(
            _without_none(
                {
                    "path": f.path,
                    "lineCoverage": _counter_to_dict(f.line_coverage),
                    "branchCoverage": _counter_to_dict(f.branch_coverage) if f.branch_coverage else None,
                    "classes": classes,
                }
            )
        )
    return {
        "schemaVersion": document.schema_version,
        "generator": document.generator,
        "generatedAt": document.generated_at,
        "files": files,
    }


def coverage_document_from_dict(data: Dict[str, Any]) -> CoverageDocument:
    files = []
    for f in data.get("files") or []:
        classes = tuple(
            CoverageClass(
                name=c["name"],
                line_coverage=_counter_from_dict(c.get("lineCoverage")),
                branch_coverage=_counter_from_dict(c.get("branchCoverage")),
                methods=tuple(
                    CoverageMethod(
                        name=m["name"],
                        signature=m.get("signature"),
                        line_coverage=_counter_from_dict(m.get("lineCoverage")),
                        branch_coverage=_counter_from_dict(m.get("branchCoverage")),
                    )
                    for m in c.get("methods") or []
                ),
            )
            for c in f.get("classes") or []
        )
        files.append(
            CoverageFile(
                path=f["path"],
                line_coverage=_counter_from_dict(f["lineCoverage"]),
                branch_coverage=_counter_from_dict(f.get("branchCoverage")),
                classes=classes,
            )
        )
    return CoverageDocument(
        schema_version=int(data.get("schemaVersion", 1)),
        generator=data.get("generator", ""),
        generated_at=data.get("generatedAt", ""),
        files=tuple(files),
    )


# ── Legacy XML ───────────────────────────────────────────────────────


def xml_escape(text: str) -> str:
    """Escape ``& < > "`` for element text and attribute values."""
    return _sax_escape(text, {'"': "&quot;"})


def _metric_to_xml(metric: Metric) -> str:
    attrs = [f'kind="{metric.kind}"', f'name="{xml_escape(metric.name)}"']
    for key, value in metric.to_dict().items():
        if key in ("kind", "name"):
            continue
        attrs.append(f'{key}="{value}"')
    return f"      <metric {' '.join(attrs)}/>"


def compat_xml_string(document: PriospotDocument) -> str:
    project = document.project
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<panopticode schemaVersion="{document.schema_version}" '
        f'generatedAt="{xml_escape(document.generated_at)}">',
        f'  <project name="{xml_escape(project.name)}" '
        f'version="{xml_escape(project.version or "")}" '
        f'basePath="{xml_escape(project.base_path)}">',
    ]
    for f in project.files:
        lines.append(f'    <file name="{xml_escape(f.name)}" path="{xml_escape(f.path)}">')
        lines.extend(_metric_to_xml(m) for m in f.metrics)
        lines.append("    </file>")
    lines.append("  </project>")
    lines.append("</panopticode>")
    return "\n".join(lines) + "\n"


def write_compat_xml(document: PriospotDocument, output_path: Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(compat_xml_string(document), encoding="utf-8")
    return output_path


def read_compat_xml(input_path: Path) -> PriospotDocument:
    input_path = Path(input_path)
    try:
        root = ET.parse(input_path).getroot()
        project_node = root.find("project")
        if project_node is None:
            raise ValueError("missing <project> element")
        files = []
        for file_node in project_node.findall("file"):
            metrics = tuple(
                metric_from_dict(dict(metric_node.attrib))
                for metric_node in file_node.findall("metric")
            )
            files.append(
                FileEntry(name=file_node.get("name", ""), path=file_node.get("path", ""), metrics=metrics)
            )
        project = Project(
            name=project_node.get("name", ""),
            version=project_node.get("version") or None,
            base_path=project_node.get("basePath", ""),
            files=tuple(files),
        )
        return PriospotDocument(
            schema_version=int(root.get("schemaVersion", "1")),
            generated_at=root.get("generatedAt", ""),
            project=project,
        )
    except (ET.ParseError, ValueError, KeyError) as e:
        raise ReportParseError(input_path, str(e))
