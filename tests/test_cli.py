import json
from pathlib import Path

import yaml
from click.testing import CliRunner

from routespec.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


def _write_config(tmp_path: Path, content: str) -> Path:
    config = tmp_path / "routespec.yaml"
    config.write_text(content)
    return config


class TestCliGenerate:
    def test_generate_yaml_with_defaults(self, tmp_path):
        output = tmp_path / "openapi.yaml"
        result = CliRunner().invoke(main, ["generate", str(FIXTURES / "shop.yaml"), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert output.exists()
        data = yaml.safe_load(output.read_text())
        assert data["openapi"] == "3.1.0"
        assert data["info"]["title"] == "Open API Specification"
        assert "/products" in data["paths"]

    def test_generate_json_from_config(self, tmp_path):
        output = tmp_path / "openapi.json"
        result = CliRunner().invoke(
            main,
            ["generate", str(FIXTURES / "shop.yaml"), "-c", str(FIXTURES / "config.yaml"), "-o", str(output)],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["servers"] == [{"url": "https://api.shop.test"}]
        assert data["components"]["securitySchemes"]["bearerAuth"]["bearerFormat"] == "JWT"
        assert list(data["components"]["schemas"]) == sorted(data["components"]["schemas"])

    def test_format_option_overrides_config(self, tmp_path):
        output = tmp_path / "out.yaml"
        result = CliRunner().invoke(
            main,
            [
                "generate", str(FIXTURES / "shop.yaml"),
                "-c", str(FIXTURES / "config.yaml"),
                "-o", str(output),
                "--format", "yaml",
            ],
        )

        assert result.exit_code == 0, result.output
        assert output.read_text().startswith("openapi: 3.1.0")

    def test_disabled(self, tmp_path):
        config = _write_config(tmp_path, "enabled: false\n")
        output = tmp_path / "openapi.yaml"
        result = CliRunner().invoke(main, ["generate", str(FIXTURES / "shop.yaml"), "-c", str(config), "-o", str(output)])

        assert result.exit_code == 0
        assert "disabled" in result.output
        assert not output.exists()

    def test_invalid_config_fails(self, tmp_path):
        config = _write_config(tmp_path, "format: xml\n")
        result = CliRunner().invoke(main, ["generate", str(FIXTURES / "shop.yaml"), "-c", str(config)])

        assert result.exit_code != 0
        assert "Invalid config" in result.output

    def test_invalid_source_fails(self, tmp_path):
        source = tmp_path / "dump.yaml"
        source.write_text("functions: 12\n")
        result = CliRunner().invoke(main, ["generate", str(source), "-o", str(tmp_path / "o.yaml")])

        assert result.exit_code != 0
        assert "invalid declaration dump" in result.output


class TestCliMultiModule:
    def test_contributor_writes_partial(self, tmp_path):
        config = _write_config(tmp_path, "mode: contributor\nmodule_id: shop\n")
        output = tmp_path / "shop.partial.json"
        result = CliRunner().invoke(main, ["generate", str(FIXTURES / "shop.yaml"), "-c", str(config), "-o", str(output)])

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["moduleId"] == "shop"
        assert "/orders" in data["paths"]
        assert "shop.Order" in data["schemas"]

    def test_aggregator_merges_partials(self, tmp_path):
        partial = tmp_path / "billing.json"
        partial.write_text(json.dumps({
            "moduleId": "billing",
            "paths": {"/invoices": {"get": {"summary": "List invoices"}}},
            "schemas": {"billing.Invoice": {"type": "object"}},
        }))
        config = _write_config(
            tmp_path,
            f"mode: aggregator\npartial_spec_paths:\n  - {partial}\n  - {tmp_path / 'missing.json'}\n",
        )
        output = tmp_path / "openapi.yaml"
        result = CliRunner().invoke(main, ["generate", str(FIXTURES / "shop.yaml"), "-c", str(config), "-o", str(output)])

        assert result.exit_code == 0, result.output
        data = yaml.safe_load(output.read_text())
        assert data["paths"]["/invoices"]["get"]["summary"] == "List invoices"
        assert "/products" in data["paths"]
        assert "billing.Invoice" in data["components"]["schemas"]

    def test_merge_command_local_wins(self, tmp_path):
        partial = tmp_path / "a.json"
        partial.write_text(json.dumps({"moduleId": "a", "paths": {"/x": {"get": {"summary": "A"}}}}))
        local = tmp_path / "local.yaml"
        local.write_text("paths:\n  /x:\n    get:\n      summary: B\n")
        output = tmp_path / "merged.json"
        result = CliRunner().invoke(
            main, ["merge", str(partial), "--local", str(local), "-o", str(output), "--format", "json"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert data["paths"]["/x"]["get"]["summary"] == "B"

    def test_merge_command_counts_conflicts(self, tmp_path):
        for name, summary in (("a", "first"), ("b", "second")):
            (tmp_path / f"{name}.json").write_text(
                json.dumps({"moduleId": name, "paths": {"/x": {"get": {"summary": summary}}}})
            )
        output = tmp_path / "merged.yaml"
        result = CliRunner().invoke(
            main, ["merge", str(tmp_path / "a.json"), str(tmp_path / "b.json"), "-o", str(output)]
        )

        assert result.exit_code == 0, result.output
        assert "(1 conflicts)" in result.output
        assert yaml.safe_load(output.read_text())["paths"]["/x"]["get"]["summary"] == "second"


class TestCliInspect:
    def test_lists_operations(self):
        result = CliRunner().invoke(main, ["inspect", str(FIXTURES / "shop.yaml")])

        assert result.exit_code == 0, result.output
        assert "GET     /products" in result.output
        assert "PUT     /orders/{orderId}/shape" in result.output
        assert "8 operations" in result.output
