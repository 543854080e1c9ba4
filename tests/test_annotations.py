import pytest

from Model.annotations import HoverState, TOOLTIP_OFFSET, TombAnnotation, annotation_from_record, \
    annotations_from_records, hit_test, shape_from_records, shape_to_records, tomb_label


def _square(tid, x0, y0, size):
    return TombAnnotation(tid, ((x0, y0), (x0 + size, y0), (x0 + size, y0 + size), (x0, y0 + size), (x0, y0)),
                          f"Tomba {tid}")


def test_shape_records_are_read_verbatim():
    records = [{"x": 10.123456, "y": 5}, {"x": "20.5", "y": 7.25}]
    assert shape_from_records(records) == [(10.123456, 5.0), (20.5, 7.25)]
    assert shape_from_records(None) == []


def test_shape_to_records():
    assert shape_to_records([(1.5, 2.25)]) == [{"x": 1.5, "y": 2.25}]


@pytest.mark.parametrize("bad", [[{"x": 1}], [{"x": "a", "y": 2}], [None], [[1, 2]]])
def test_malformed_shape_records(bad):
    with pytest.raises(ValueError):
        shape_from_records(bad)


def test_label_fallbacks():
    assert tomb_label({"Nome": "Tomba del Guerriero", "Numero_tomba": 7}) == "Tomba del Guerriero"
    assert tomb_label({"Nome": "", "Numero_tomba": 7}) == "Tomba 7"
    assert tomb_label({}) == "Tomba"


def test_annotation_from_record():
    ann = annotation_from_record({"id": 12, "Numero_tomba": 4, "datazione": "primo quarto V sec. a.C.",
                                  "shape_coordinates": [{"x": 1, "y": 2}]})
    assert ann.id == "12"
    assert ann.label == "Tomba 4"
    assert ann.date == "primo quarto V sec. a.C."
    assert ann.is_point


def test_records_without_shape_are_skipped():
    anns = annotations_from_records([
        {"id": "a", "shape_coordinates": []},
        {"id": "b"},
        {"id": "c", "shape_coordinates": [{"x": 1}]},
        {"id": "d", "shape_coordinates": [{"x": 1, "y": 1}]},
    ])
    assert [a.id for a in anns] == ["d"]


def test_hit_point_marker():
    marker = TombAnnotation("m", ((50.0, 50.0),), "Tomba 1")
    assert hit_test([marker], (50.2, 50.1)) is marker
    assert hit_test([marker], (51.0, 50.0)) is None
    assert hit_test([marker], None) is None


def test_hit_polygon_inside_and_on_edge():
    sq = _square("s", 10, 10, 10)
    assert hit_test([sq], (15, 15)) is sq
    assert hit_test([sq], (10, 15)) is sq
    assert hit_test([sq], (25, 15)) is None


def test_hit_open_polygon():
    tri = TombAnnotation("t", ((0.0, 0.0), (10.0, 0.0), (0.0, 10.0)), "Tomba t")
    assert hit_test([tri], (2, 2)) is tri


def test_two_point_shape_is_never_hit():
    line = TombAnnotation("l", ((0.0, 0.0), (10.0, 10.0)), "Tomba l")
    assert hit_test([line], (5, 5)) is None


def test_topmost_annotation_wins():
    below = _square("below", 0, 0, 50)
    above = _square("above", 10, 10, 10)
    assert hit_test([below, above], (15, 15)) is above
    assert hit_test([below, above], (40, 40)) is below


def test_hover_state_tracks_one_annotation():
    a = _square("a", 0, 0, 10)
    b = _square("b", 20, 0, 10)
    h = HoverState()
    assert h.update(a, (100, 80)) is True
    assert h.update(a, (101, 80)) is False
    assert h.update(b, (300, 80)) is True
    assert h.annotation is b
    assert h.tooltip_pos == (300 + TOOLTIP_OFFSET[0], 80 + TOOLTIP_OFFSET[1])
    assert h.clear() is True
    assert h.annotation is None
    assert h.clear() is False
