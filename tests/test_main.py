from prepcards import main as cli
from prepcards.card_models import Card, NoteSection

LC_CSV = "ID,Name,Status,Takeaway\n1,1. Two Sum,red,hash map\n"


def test_format_card_hides_notes_until_revealed():
    card = Card(
        id="1",
        deck="leetcode",
        status="red",
        title="1. Two Sum",
        link="https://leetcode.com/problems/two-sum/",
        notes=[NoteSection("Takeaway", "hash map")],
    )
    assert "Takeaway" not in cli.format_card(card)
    text = cli.format_card(card, reveal=True)
    assert text.startswith("[RED] 1. Two Sum")
    assert "  - Takeaway: hash map" in text


def test_draw_from_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    csv_path = tmp_path / "lc.csv"
    csv_path.write_text(LC_CSV, encoding="utf-8")
    monkeypatch.setattr(cli, "load_config", lambda path=None: {"decks": {}, "cache": {"dir": str(tmp_path / "c")}})

    code = cli.main(["draw", "--deck", "leetcode", "--file", str(csv_path), "--reveal"])
    out = capsys.readouterr().out
    assert code == 0
    assert "1. Two Sum" in out
    assert "hash map" in out


def test_import_reports_parse_error(tmp_path, monkeypatch, caplog):
    csv_path = tmp_path / "bad.csv"
    csv_path.write_text("ID,Name,Status\n1,One\n", encoding="utf-8")
    monkeypatch.setattr(cli, "load_config", lambda path=None: {"decks": {}, "cache": {"dir": str(tmp_path / "c")}})
    caplog.set_level("ERROR")
    assert cli.main(["import", "--deck", "leetcode", str(csv_path)]) == 1
    assert any("Too few fields" in r.message for r in caplog.records)


def test_missing_url_is_reported(tmp_path, monkeypatch):
    monkeypatch.delenv("PREPCARDS_SD_CSV_URL", raising=False)
    monkeypatch.setattr(cli, "load_config", lambda path=None: {"decks": {}, "cache": {"dir": str(tmp_path / "c")}})
    assert cli.main(["draw", "--deck", "system_design"]) == 1


def test_invalid_config_exits_2(monkeypatch):
    monkeypatch.setattr(cli, "load_config", lambda path=None: {"weights": {}})
    assert cli.main(["draw"]) == 2


def test_serve_proxy_stops_on_keyboard_interrupt(monkeypatch):
    seen = {}

    class FakeServer:
        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def serve_forever(self):
            raise KeyboardInterrupt

    def fake_make_server(host, port, app):
        seen.update(host=host, port=port, app=app)
        return FakeServer()

    monkeypatch.setattr(cli, "make_server", fake_make_server)
    monkeypatch.setattr(cli, "load_config", lambda path=None: {})
    assert cli.main(["serve-proxy", "--port", "9000"]) == 0
    assert seen["host"] == "127.0.0.1"
    assert seen["port"] == 9000
    assert callable(seen["app"])


def test_import_with_broken_quoting_exits_with_error(tmp_path, monkeypatch, caplog):
    csv_path = tmp_path / "broken.csv"
    csv_path.write_text('ID,Name\n1,One\n"2"x,Two\n', encoding="utf-8")
    monkeypatch.setattr(cli, "load_config", lambda path=None: {"decks": {}, "cache": {"dir": str(tmp_path / "c")}})
    caplog.set_level("ERROR")
    assert cli.main(["import", "--deck", "leetcode", str(csv_path)]) == 1
    assert "Row 2" in caplog.text
