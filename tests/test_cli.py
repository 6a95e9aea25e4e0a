import json
from pathlib import Path

import pytest
from PIL import Image
from typer.testing import CliRunner

from inkmark.cli import app
from inkmark.processors.logo import clear_logo_cache

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.setenv("INKMARK_LOGO_DIR", str(tmp_path / "logos"))
    monkeypatch.delenv("INKMARK_OUTPUT_FORMAT", raising=False)
    clear_logo_cache()


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "watermark_settings.json"


def invoke(settings_path, *args):
    return runner.invoke(app, ["--settings", str(settings_path), *args])


def saved(settings_path) -> dict:
    return json.loads(settings_path.read_text())


@pytest.fixture
def portfolio(tmp_path, gradient_base):
    folder = tmp_path / "portfolio"
    folder.mkdir()
    (folder / "tattoo1.png").write_bytes(gradient_base)
    (folder / "tattoo2.png").write_bytes(gradient_base)
    (folder / "notes.txt").write_text("not an image")
    return folder


def test_settings_show_defaults(settings_path):
    result = invoke(settings_path, "settings", "show")

    assert result.exit_code == 0
    assert "bottom-right" in result.stdout
    assert "50%" in result.stdout


def test_settings_set_snaps_to_form_steps(settings_path):
    result = invoke(
        settings_path, "settings", "set", "--opacity", "0.73", "--size", "22.4", "--position", "center"
    )

    assert result.exit_code == 0
    doc = saved(settings_path)
    assert doc["opacity"] == 0.75
    assert doc["size"] == 22.0
    assert doc["position"] == "center"


@pytest.mark.parametrize(
    "args",
    [["--opacity", "1.5"], ["--opacity", "0.05"], ["--size", "80"], ["--position", "left"]],
)
def test_settings_set_rejects_values_outside_form(settings_path, args):
    result = invoke(settings_path, "settings", "set", *args)

    assert result.exit_code != 0
    assert not settings_path.exists()


def test_settings_set_disable(settings_path):
    assert invoke(settings_path, "settings", "set", "--disabled").exit_code == 0
    assert saved(settings_path)["enabled"] is False


def test_settings_set_nothing(settings_path):
    result = invoke(settings_path, "settings", "set")

    assert result.exit_code == 0
    assert not settings_path.exists()


def test_settings_reset(settings_path):
    invoke(settings_path, "settings", "set", "--size", "10")

    assert invoke(settings_path, "settings", "reset").exit_code == 0
    assert saved(settings_path)["size"] == 30


def test_broken_settings_file(settings_path):
    settings_path.write_text("{broken")

    result = invoke(settings_path, "settings", "show")

    assert result.exit_code == 1


def test_upload_logo(settings_path, logo_file, tmp_path):
    result = invoke(settings_path, "settings", "upload-logo", str(logo_file))

    assert result.exit_code == 0
    stored = saved(settings_path)["logoUrl"]
    assert stored.startswith(str(tmp_path / "logos"))
    assert Path(stored).read_bytes() == logo_file.read_bytes()


def test_upload_logo_rejects_broken_file(settings_path, tmp_path):
    broken = tmp_path / "logo.png"
    broken.write_bytes(b"nope")

    result = invoke(settings_path, "settings", "upload-logo", str(broken))

    assert result.exit_code == 1
    assert not settings_path.exists()


def test_apply_directory(settings_path, portfolio, logo_file, tmp_path):
    invoke(settings_path, "settings", "set", "--logo-url", str(logo_file))
    output = tmp_path / "public"

    result = invoke(settings_path, "apply", str(portfolio), "-o", str(output))

    assert result.exit_code == 0
    assert sorted(p.name for p in output.iterdir()) == [
        "tattoo1_watermarked.jpg",
        "tattoo2_watermarked.jpg",
    ]


def test_apply_directory_asks_before_overwriting(settings_path, portfolio, logo_file, tmp_path):
    invoke(settings_path, "settings", "set", "--logo-url", str(logo_file))
    output = tmp_path / "public"
    output.mkdir()
    existing = output / "tattoo1_watermarked.jpg"
    existing.write_bytes(b"published")

    result = runner.invoke(
        app, ["--settings", str(settings_path), "apply", str(portfolio), "-o", str(output)], input="n\n"
    )

    assert result.exit_code == 0
    assert "Overwrite" in result.stdout
    assert existing.read_bytes() == b"published"
    assert (output / "tattoo2_watermarked.jpg").exists()


def test_apply_directory_overwrite_flag(settings_path, portfolio, logo_file, tmp_path):
    invoke(settings_path, "settings", "set", "--logo-url", str(logo_file))
    output = tmp_path / "public"
    output.mkdir()
    existing = output / "tattoo1_watermarked.jpg"
    existing.write_bytes(b"published")

    result = invoke(settings_path, "apply", str(portfolio), "-o", str(output), "-y")

    assert result.exit_code == 0
    with Image.open(existing) as img:
        assert img.format == "JPEG"


def test_apply_passthrough_asks_for_copy_name(settings_path, portfolio, tmp_path):
    invoke(settings_path, "settings", "set", "--disabled")
    output = tmp_path / "public"
    output.mkdir()
    existing = output / "tattoo1_watermarked.png"
    existing.write_bytes(b"published")

    result = runner.invoke(
        app, ["--settings", str(settings_path), "apply", str(portfolio), "-o", str(output)], input="n\n"
    )

    assert result.exit_code == 0
    assert existing.read_bytes() == b"published"


def test_apply_png_format(settings_path, portfolio, logo_file):
    invoke(settings_path, "settings", "set", "--logo-url", str(logo_file))

    result = invoke(settings_path, "apply", str(portfolio / "tattoo1.png"), "--format", "png", "-s", "_wm")

    assert result.exit_code == 0
    with Image.open(portfolio / "tattoo1_wm.png") as img:
        assert img.format == "PNG"


def test_apply_with_missing_logo_keeps_originals(settings_path, portfolio, tmp_path):
    invoke(settings_path, "settings", "set", "--logo-url", str(tmp_path / "gone.png"))

    result = invoke(settings_path, "apply", str(portfolio))

    assert result.exit_code == 0
    copy = portfolio / "tattoo1_watermarked.png"
    assert copy.read_bytes() == (portfolio / "tattoo1.png").read_bytes()


def test_apply_empty_directory(settings_path, tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()

    assert invoke(settings_path, "apply", str(empty)).exit_code == 1


def test_apply_unknown_format(settings_path, portfolio):
    assert invoke(settings_path, "apply", str(portfolio), "--format", "gif").exit_code == 1


def test_preview_prints_data_uri(settings_path, image_file, logo_file):
    result = invoke(settings_path, "preview", str(image_file), "--logo", str(logo_file), "--opacity", "0.3")

    assert result.exit_code == 0
    assert result.stdout.strip().splitlines()[-1].startswith("data:image/jpeg;base64,")
    assert not settings_path.exists()


def test_preview_disabled_writes_original(settings_path, image_file, logo_file, tmp_path):
    output = tmp_path / "preview.png"

    result = invoke(
        settings_path, "preview", str(image_file), "--logo", str(logo_file), "--disabled", "-o", str(output)
    )

    assert result.exit_code == 0
    assert output.read_bytes() == image_file.read_bytes()


def test_info():
    result = runner.invoke(app, ["info"])

    assert result.exit_code == 0
    assert "top-left" in result.stdout
