"""Tests for report serialization and deserialization."""

import tempfile
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path

import pytest

from glcaps import (
    CapabilityGroup,
    CapabilityValue,
    Implementation,
    MalformedReport,
    ReportSerializationError,
    assemble_report,
    deserialize_report,
    serialize_report,
)
from glcaps.serializer import set_submitter, write_report

NOW = datetime(2015, 6, 1, 12, 30, 5)


def make_report(**kwargs):
    core = CapabilityGroup(name="core")
    core.record("GL_MAX_TEXTURE_SIZE", CapabilityValue("16384"))
    core.record("GL_MAX_VIEWPORT_DIMS", CapabilityValue("16384 ,16384"))
    foo = CapabilityGroup(name="foo", supported=False)
    defaults = dict(
        implementation=Implementation(
            vendor="ATI Technologies Inc.",
            renderer="AMD Radeon R9 200 Series",
            version="4.5.13399 Compatibility Profile Context 15.200.1062.1004",
            shading_language_version="4.50",
            operating_system="Windows 10",
        ),
        groups=[core, foo],
        extensions=["GL_AMD_a", "GL_ARB_b", "GL_EXT_c"],
        os_extensions=["WGL_ARB_a", "WGL_EXT_b"],
        context_type="default",
        submitter="tester",
    )
    defaults.update(kwargs)
    return assemble_report(**defaults)


class TestSerializeReport:
    def test_element_order(self):
        root = ET.fromstring(serialize_report(make_report(), now=NOW))

        assert root.tag == "report"
        assert [child.tag for child in root] == [
            "fileversion",
            "appversion",
            "description",
            "contexttype",
            "date",
            "submitter",
            "os",
            "implementation",
            "extensions",
            "caps",
            "categories",
        ]
        assert root.findtext("fileversion") == "3.0"
        assert root.findtext("date") == "2015-06-01 12:30:05"
        assert root.findtext("submitter") == "tester"

    def test_extension_count_includes_platform_extensions(self):
        root = ET.fromstring(serialize_report(make_report(), now=NOW))
        extensions = root.find("extensions")

        assert extensions.get("count") == "5"
        assert [e.text for e in extensions] == ["GL_AMD_a", "GL_ARB_b", "GL_EXT_c"]

    def test_caps_carry_identifiers(self):
        root = ET.fromstring(serialize_report(make_report(), now=NOW))
        caps = root.find("caps")

        ids = [cap.get("id") for cap in caps]
        assert ids == [
            "GL_VENDOR",
            "GL_RENDERER",
            "GL_VERSION",
            "GL_SHADING_LANGUAGE_VERSION",
            "GL_MAX_TEXTURE_SIZE",
            "GL_MAX_VIEWPORT_DIMS",
        ]
        assert all(cap.tag == cap.get("id") for cap in caps)
        assert caps.find("GL_MAX_VIEWPORT_DIMS").findtext("value") == "16384 ,16384"

    def test_unsupported_group_marked(self):
        root = ET.fromstring(serialize_report(make_report(), now=NOW))
        categories = {c.get("name"): c for c in root.find("categories")}

        assert categories["foo"].get("supported") == "false"
        assert categories["core"].get("supported") == "true"
        assert categories["implementation"].get("visible") == "false"

    def test_version_check_skipped_marked(self):
        core = CapabilityGroup(name="core", version_check_skipped=True)
        core.record("GL_MAX_TEXTURE_SIZE", CapabilityValue("16384"))
        plain = CapabilityGroup(name="plain")
        root = ET.fromstring(serialize_report(make_report(groups=[core, plain]), now=NOW))
        categories = {c.get("name"): c for c in root.find("categories")}

        assert categories["core"].get("versioncheckskipped") == "true"
        assert "versioncheckskipped" not in categories["plain"].attrib
        assert "versioncheckskipped" not in categories["implementation"].attrib

    def test_serialization_date_is_now(self):
        before = datetime.now().replace(microsecond=0)

        root = ET.fromstring(serialize_report(make_report()))

        date = datetime.strptime(root.findtext("date"), "%Y-%m-%d %H:%M:%S")
        assert before <= date <= datetime.now()

    def test_deterministic(self):
        report = make_report()

        assert serialize_report(report, now=NOW) == serialize_report(report, now=NOW)

    def test_only_date_differs(self):
        report = make_report()

        first = serialize_report(report, now=NOW).decode("utf-8")
        second = serialize_report(report, now=datetime(2020, 1, 1)).decode("utf-8")

        assert first != second
        assert first.replace("2015-06-01 12:30:05", "2020-01-01 00:00:00") == second

    def test_invalid_identifier_rejected(self):
        group = CapabilityGroup(name="bad")
        group.record("1 bad name", CapabilityValue("1"))

        with pytest.raises(ReportSerializationError, match="bad name"):
            serialize_report(make_report(groups=[group]), now=NOW)

    def test_write_report(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = write_report(make_report(), Path(tmp) / "report.xml")

            view = deserialize_report(path.read_bytes())

        assert view.submitter == "tester"


class TestDeserializeReport:
    def test_round_trip(self):
        report = make_report()

        view = deserialize_report(serialize_report(report, now=NOW))

        assert view.extension_count == report.extension_count
        assert view.extensions == report.extensions
        expected_caps = {}
        for group in report.groups:
            expected_caps.update(group.values())
        assert view.capabilities == expected_caps
        assert view.implementation == {
            "operatingsystem": "Windows 10",
            "vendor": "ATI Technologies Inc.",
            "renderer": "AMD Radeon R9 200 Series",
            "version": "4.5.13399 Compatibility Profile Context 15.200.1062.1004",
            "shadinglanguageversion": "4.50",
        }
        assert view.description == report.description
        assert view.context_type == "default"
        assert view.groups == {"implementation": True, "core": True, "foo": False}

    def test_version_check_skipped_read_back(self):
        skipped = CapabilityGroup(name="compute", version_check_skipped=True)
        report = make_report(groups=[skipped, CapabilityGroup(name="core")])

        view = deserialize_report(serialize_report(report, now=NOW))

        assert view.version_check_skipped == ["compute"]
        assert view.groups["compute"] is True

    def test_version_check_skipped_absent(self):
        view = deserialize_report(serialize_report(make_report(), now=NOW))

        assert view.version_check_skipped == []

    def test_empty_values_survive(self):
        group = CapabilityGroup(name="strings")
        group.record("GL_EXTENSION_STRING", CapabilityValue("", ok=False))

        view = deserialize_report(serialize_report(make_report(groups=[group], submitter="")))

        assert view.capabilities["GL_EXTENSION_STRING"] == ""
        assert view.submitter == ""

    def test_database_document(self):
        document = """<report>
            <implementation>
                <vendor>Intel</vendor>
                <renderer>HD Graphics 530</renderer>
            </implementation>
            <extensions>
                <extension>GL_ARB_a</extension>
                <extension>GL_ARB_b</extension>
            </extensions>
        </report>"""

        view = deserialize_report(document)

        assert view.implementation == {"vendor": "Intel", "renderer": "HD Graphics 530"}
        assert view.extension_count == 2
        assert view.capabilities == {}

    def test_legacy_document_without_implementation(self):
        document = """<implementationinfo>
            <os>Windows 7</os>
            <extensions count="1"><extension>GL_ARB_a</extension></extensions>
            <caps>
                <GL_VENDOR id="GL_VENDOR"><value>NVIDIA</value></GL_VENDOR>
                <GL_MAX_TEXTURE_SIZE id="GL_MAX_TEXTURE_SIZE"><value>8192</value></GL_MAX_TEXTURE_SIZE>
            </caps>
        </implementationinfo>"""

        view = deserialize_report(document)

        assert view.implementation == {"operatingsystem": "Windows 7", "vendor": "NVIDIA"}
        assert view.capabilities["GL_MAX_TEXTURE_SIZE"] == "8192"

    @pytest.mark.parametrize(
        "document, message",
        [
            ("<devices/>", "report"),
            ("<report><implementation/></report>", "extensions"),
            ("<report><extensions count='0'/></report>", "implementation"),
            ("<report><implementation/><extensions count='x'/></report>", "count"),
            ("<report>", "Invalid XML"),
        ],
    )
    def test_malformed(self, document, message):
        with pytest.raises(MalformedReport, match=message):
            deserialize_report(document)


class TestSetSubmitter:
    def test_replaces_submitter(self):
        document = serialize_report(make_report(submitter=""), now=NOW)

        updated = set_submitter(document, "someone")

        assert deserialize_report(updated).submitter == "someone"

    def test_rejects_non_report(self):
        with pytest.raises(MalformedReport):
            set_submitter(b"<devices/>", "someone")
