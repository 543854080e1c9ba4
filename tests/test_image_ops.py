from Model.image_ops import load_base_image


def test_load_base_image(plan_png):
    qimg = load_base_image(plan_png)
    assert qimg is not None
    assert (qimg.width(), qimg.height()) == (400, 300)
    # white background survives the BGR -> RGB conversion
    assert qimg.pixelColor(200, 150).getRgb()[:3] == (255, 255, 255)


def test_load_base_image_missing(tmp_path):
    assert load_base_image(str(tmp_path / "nope.png")) is None
    assert load_base_image(None) is None


def test_load_base_image_unreadable(tmp_path):
    bad = tmp_path / "broken.png"
    bad.write_bytes(b"not a png")
    assert load_base_image(str(bad)) is None
