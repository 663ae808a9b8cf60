"""Tests for the canonical JSON document and the legacy XML form."""

import json

import pytest

from priospot.exceptions import InvalidCoverageCounterError, ReportParseError
from priospot.model import (
    ClassEntry,
    CoverageCounter,
    CoverageDocument,
    CoverageFile,
    DecimalMetric,
    FileEntry,
    IntegerMetric,
    MethodEntry,
    MetricNames,
    PackageEntry,
    Position,
    PriospotDocument,
    Project,
    RatioMetric,
    SupplementDeclaration,
)
from priospot.model.serialization import (
    compat_xml_string,
    coverage_document_to_dict,
    document_to_dict,
    dumps_document,
    loads_document,
    read_compat_xml,
    read_document,
    write_compat_xml,
    write_document,
)


def _document(version="1.2.3", name="demo"):
    foo = FileEntry(
        name="Foo.kt",
        path="src/main/kotlin/Foo.kt",
        metrics=(
            DecimalMetric(MetricNames.C3_INDICATOR, 0.4321987),
            RatioMetric(MetricNames.LINE_COVERAGE, 80.0, 100.0),
            IntegerMetric(MetricNames.NCSS, 14),
        ),
    )
    project = Project(
        name=name,
        version=version,
        base_path="/repo",
        metrics=(IntegerMetric(MetricNames.CHURN_DURATION, 30),),
        files=(foo,),
    )
    return PriospotDocument(generated_at="2026-01-01T00:00:00Z", project=project)


class TestCanonicalJson:
    def test_round_trip(self):
        doc = _document()
        assert loads_document(dumps_document(doc)) == doc

    def test_round_trip_with_nested_entries(self):
        method = MethodEntry("run", "demo.Foo.run", Position(3, 5), metrics=(IntegerMetric("NCSS", 2),))
        klass = ClassEntry("Foo", "demo.Foo", Position(1, 1), methods=(method,))
        doc = _document()
        project = doc.project.with_files(
            [FileEntry("Foo.kt", "src/main/kotlin/Foo.kt", classes=(klass,))]
        )
        project = Project(
            name=project.name,
            version=project.version,
            base_path=project.base_path,
            files=project.files,
            supplements=(SupplementDeclaration("churn", "git history"),),
            packages=(PackageEntry("demo"),),
        )
        doc = PriospotDocument(generated_at=doc.generated_at, project=project)
        assert loads_document(dumps_document(doc)) == doc

    def test_camel_case_keys(self):
        data = document_to_dict(_document())
        assert data["schemaVersion"] == 1
        assert data["generatedAt"] == "2026-01-01T00:00:00Z"
        assert data["project"]["basePath"] == "/repo"
        assert data["project"]["files"][0]["metrics"][0]["kind"] == "decimal"

    def test_version_omitted_when_absent(self):
        data = document_to_dict(_document(version=None))
        assert "version" not in data["project"]

    def test_unknown_keys_ignored(self):
        data = document_to_dict(_document())
        data["extra"] = True
        data["project"]["files"][0]["owner"] = "someone"
        doc = loads_document(json.dumps(data))
        assert doc.project.files[0].path == "src/main/kotlin/Foo.kt"

    def test_write_and_read(self, tmp_path):
        doc = _document()
        path = write_document(doc, tmp_path / "out" / "priospot.json")
        assert read_document(path) == doc

    def test_read_invalid_document(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ReportParseError):
            read_document(path)


class TestCoverageDocument:
    def test_optional_branch_omitted(self):
        doc = CoverageDocument(
            generator="coverageReport",
            generated_at="2026-01-01T00:00:00Z",
            files=(CoverageFile("a.kt", CoverageCounter(1, 2)),),
        )
        entry = coverage_document_to_dict(doc)["files"][0]
        assert entry["lineCoverage"] == {"covered": 1, "total": 2}
        assert "branchCoverage" not in entry

    def test_sorted_deterministic(self):
        doc = CoverageDocument(
            generator="coverageReport",
            generated_at="",
            files=(
                CoverageFile("./b.kt", CoverageCounter(1, 1)),
                CoverageFile("a.kt", CoverageCounter(1, 1)),
            ),
        ).sorted_deterministic()
        assert [f.path for f in doc.files] == ["a.kt", "b.kt"]


class TestCoverageCounter:
    def test_sum(self):
        assert CoverageCounter(3, 5) + CoverageCounter(2, 5) == CoverageCounter(5, 10)

    @pytest.mark.parametrize("covered,total", [(6, 5), (-1, 5), (0, -1)])
    def test_invalid_counters_rejected(self, covered, total):
        with pytest.raises(InvalidCoverageCounterError):
            CoverageCounter(covered, total)


class TestCompatXml:
    def test_escapes_special_characters(self):
        xml = compat_xml_string(_document(name='a&b<c>"d"'))
        assert 'name="a&amp;b&lt;c&gt;&quot;d&quot;"' in xml
        assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')

    def test_metric_attributes(self):
        xml = compat_xml_string(_document())
        assert '<metric kind="ratio" name="Line Coverage" numerator="80.0" denominator="100.0"/>' in xml
        assert '<metric kind="integer" name="NCSS" value="14"/>' in xml

    def test_read_back(self, tmp_path):
        doc = _document(name='a&b<c>"d"')
        path = write_compat_xml(doc, tmp_path / "priospot.xml")
        restored = read_compat_xml(path)
        assert restored.project.name == 'a&b<c>"d"'
        assert restored.project.version == "1.2.3"
        assert restored.project.files == doc.project.files
        assert restored.generated_at == doc.generated_at
