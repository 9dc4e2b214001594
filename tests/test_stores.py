from signage.layout_store import LayoutStore
from signage.models import LayoutItem, StoredLayout
from signage.revision_store import RevisionStore


def make_layout(layout_id="lobby", items=None):
    return StoredLayout(
        id=layout_id,
        name=layout_id.title(),
        items=items if items is not None else [
            LayoutItem(id="a", x=0, y=0, w=4, h=4, component_type="weather", props={"location": "Oslo"}),
        ],
    )


def test_layout_store_crud(tmp_path):
    store = LayoutStore(tmp_path)
    assert store.load_layouts() == []

    store.save_layout(make_layout())
    store.save_layout(make_layout("cafe", items=[]))
    assert [layout.id for layout in store.load_layouts()] == ["lobby", "cafe"]
    assert store.get_layout("lobby").items[0].props == {"location": "Oslo"}

    updated = make_layout()
    updated.items[0].x = 10
    store.save_layout(updated)
    assert store.get_layout("lobby").items[0].x == 10
    assert len(store.load_layouts()) == 2

    assert store.delete_layout("cafe")
    assert not store.delete_layout("cafe")
    assert store.get_layout("cafe") is None


def test_layout_file_uses_persisted_names(tmp_path):
    store = LayoutStore(tmp_path)
    store.save_layout(make_layout())
    text = (tmp_path / "layouts.json").read_text(encoding="utf-8")
    assert '"i": "a"' in text
    assert '"component": "weather"' in text


def test_corrupt_file_loads_as_empty(tmp_path):
    (tmp_path / "layouts.json").write_text("{not json", encoding="utf-8")
    assert LayoutStore(tmp_path).load_layouts() == []


def test_create_from_template(tmp_path):
    store = LayoutStore(tmp_path)
    template = store.save_template(make_layout("weather-board"))
    assert template.is_template

    layout = store.create_from_template("weather-board", "hall", "Hall")
    assert layout.id == "hall"
    assert layout.name == "Hall"
    assert not layout.is_template
    assert layout.items == template.items
    assert store.get_layout("hall") is not None
    assert store.create_from_template("missing", "x") is None

    assert store.delete_template("weather-board")
    assert store.load_templates() == []


def test_revision_store_records_history(tmp_path):
    revisions = RevisionStore(tmp_path / "revisions.json")
    first = [LayoutItem(id="a", x=0, y=0, w=2, h=2, component_type="clock")]
    second = first + [LayoutItem(id="b", x=2, y=0, w=2, h=2, component_type="news")]

    revisions.record("lobby", first)
    revisions.record("lobby", second)
    revisions.record("cafe", first)

    latest = revisions.get_latest("lobby")
    assert [item["i"] for item in latest["items"]] == ["a", "b"]

    history = revisions.get_history("lobby")
    assert [r["revision"] for r in history] == [2, 1]
    assert len(revisions.get_history("lobby", limit=1)) == 1

    revisions.clear_layout("lobby")
    assert revisions.get_latest("lobby") is None
    assert revisions.get_history("lobby") == []
    assert revisions.get_latest("cafe") is not None
    revisions.close()
