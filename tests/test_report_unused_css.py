"""
Tests for tools/report_unused_css.py

Covers:
- escaped utility selectors (.w-\\[10px\\]) are read back as one class
- base / debug / state classes are never reported
- inline <style> blocks count as definitions

Run with: pytest tests/test_report_unused_css.py -v
"""

import json

from tools.report_unused_css import build_report, main, parse_class_rules

HTML = '<div class="frame card"><span class="w-[20px]"></span></div>'
CSS = (
    ".frame{box-sizing:border-box;}\n"
    "[data-figma-render] .card{color:red;}\n"
    "[data-figma-render] .fr-abc{color:blue;}\n"
    ".w-\\[10px\\]{width:10px;}\n"
    ".w-\\[20px\\]{width:20px;}\n"
    ".debug-box{outline:none;}\n"
    ".frame.is-hover{outline:none;}\n"
)


class TestParse:
    def test_escaped_classes(self):
        rules = parse_class_rules(CSS)
        assert "w-[10px]" in rules
        assert "w-[20px]" in rules
        assert rules["frame"] == 2


class TestBuildReport:
    def test_report(self):
        report = build_report(HTML, CSS)
        assert report["total_class_rules"] == 7
        assert report["used_classes_in_html"] == 3
        assert report["unused_classes"] == ["fr-abc", "w-[10px]"]
        assert report["unused_count"] == 2
        assert report["shared_unused"] == ["fr-abc"]

    def test_inline_style_blocks(self):
        report = build_report("<style>.orphan{color:red;}</style><div></div>", "")
        assert report["unused_classes"] == ["orphan"]


class TestMain:
    def test_writes_report(self, tmp_path, monkeypatch, capsys):
        (tmp_path / "index.html").write_text(HTML, encoding="utf-8")
        (tmp_path / "style.css").write_text(CSS, encoding="utf-8")
        monkeypatch.setattr("sys.argv", ["report_unused_css.py", "--root", str(tmp_path)])
        main()
        report = json.loads((tmp_path / "unused_css_report.json").read_text(encoding="utf-8"))
        assert report["unused_count"] == 2
        assert "[UNUSED-CSS]" in capsys.readouterr().out
