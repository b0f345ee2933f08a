from audo_enhance.enhancement_options import (
    EnhancementType,
    FeedbackReason,
    MasterProfile,
    enum_values,
    parse_case_insensitive_enum,
)


def test_parse_case_insensitive_enum_accepts_uppercase() -> None:
    parsed = parse_case_insensitive_enum("APPLE_MUSIC", MasterProfile)
    assert parsed is MasterProfile.APPLE_MUSIC


def test_parse_case_insensitive_enum_accepts_digit_led_value() -> None:
    assert parse_case_insensitive_enum(" 4D ", EnhancementType) is EnhancementType.FOUR_D


def test_parse_case_insensitive_enum_rejects_unknown_value() -> None:
    try:
        parse_case_insensitive_enum("remix", EnhancementType)
    except ValueError as error:
        assert "Allowed values" in str(error)
        assert "mix, master, 4d" in str(error)
    else:
        raise AssertionError("Expected ValueError for unknown enum value")


def test_enum_values_match_expected_order() -> None:
    assert enum_values(MasterProfile) == (
        "spotify",
        "streaming",
        "apple_music",
        "soundcloud",
        "loud",
    )
    assert enum_values(FeedbackReason)[-1] == "other"
