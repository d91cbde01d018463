import json

from PIL import Image

from fractexpr.cli import main

def test_render_writes_image_and_manifest(tmp_path):
    out = tmp_path / "img" / "out.png"
    code = main(["--workers", "1", "render", "(x/w*3-2) + (y/h*3-1.5)*i", "c", "z*z + c", "5", "4", str(out)])
    assert code == 0
    with Image.open(out) as img:
        assert img.size == (5, 4)
        assert img.mode == "RGB"
    manifest = json.loads((tmp_path / "img" / "out.png.json").read_text(encoding="utf-8"))
    assert manifest["config"]["iter"] == "z*z + c"
    assert manifest["config"]["width"] == 5

def test_render_from_config(tmp_path):
    out = tmp_path / "cfg.png"
    cfg = tmp_path / "cfg.json"
    cfg.write_text(json.dumps({"width": 3, "height": 3, "output": str(out), "workers": 1}), encoding="utf-8")
    assert main(["--config", str(cfg), "--coloring", "escape", "render"]) == 0
    with Image.open(out) as img:
        assert img.size == (3, 3)

def test_syntax_error_shows_position(tmp_path, capsys):
    code = main(["--workers", "1", "render", "c", "c", "1 + ", "2", "2", str(tmp_path / "x.png")])
    assert code == 1
    assert "3: Expected a token" in capsys.readouterr().out
    assert not (tmp_path / "x.png").exists()

def test_eval_error_shows_message(tmp_path, capsys):
    code = main(["--workers", "1", "render", "1/0", "c", "z", "2", "2", str(tmp_path / "x.png")])
    assert code == 1
    assert "Error: Divide by zero" in capsys.readouterr().out
    assert not (tmp_path / "x.png").exists()

def test_bad_config_reports_error(tmp_path, capsys):
    cfg = tmp_path / "cfg.json"
    cfg.write_text(json.dumps({"coloring": "rainbow"}), encoding="utf-8")
    assert main(["--config", str(cfg), "render"]) == 1
    assert "Error: coloring" in capsys.readouterr().out

def test_long_formula_renders(tmp_path):
    out = tmp_path / "long.png"
    code = main(["--workers", "2", "render", "c", "c", "z*z+c" + "+0" * 1200, "2", "2", str(out)])
    assert code == 0
    assert out.exists()

def test_too_deep_formula_reports_position(tmp_path, capsys):
    code = main(["--workers", "1", "render", "(" * 600 + "c" + ")" * 600, "c", "z", "2", "2", str(tmp_path / "x.png")])
    assert code == 1
    assert "150: Expression too deep" in capsys.readouterr().out
