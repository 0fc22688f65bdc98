from futar.localization import STRINGS, Localizer


def test_english_default() -> None:
    lookup = Localizer()
    assert lookup.language == "en"
    assert lookup("btn_refresh") == "Refresh"


def test_hungarian_with_region_tag() -> None:
    lookup = Localizer("hu-HU")
    assert lookup.language == "hu"
    assert lookup("error_generic_comm") == "Kommunikációs hiba!"


def test_unknown_language_falls_back_to_english() -> None:
    assert Localizer("de")("title_tools") == "Tools"


def test_unknown_key_returns_key() -> None:
    assert Localizer("hu")("no_such_key") == "no_such_key"


def test_tables_cover_same_keys() -> None:
    assert set(STRINGS["hu"]) == set(STRINGS["en"])
