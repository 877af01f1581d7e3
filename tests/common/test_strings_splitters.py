from mediafocus.common.strings.splitters import csv_to_list, split_top_level


def test_csv_to_list_none():
    assert csv_to_list(None) == []


def test_csv_to_list_list_input():
    assert csv_to_list([" a ", "b", "", "  "]) == ["a", "b"]


def test_csv_to_list_string_input():
    assert csv_to_list(" a, b ,c ,, d ") == ["a", "b", "c", "d"]


def test_split_top_level_keeps_parenthesised_commas():
    desc = "h264 (High) (avc1 / 0x31637661), yuv420p(tv, bt709, progressive), 1920x1080 [SAR 1:1 DAR 16:9], 24 fps"
    assert split_top_level(desc) == [
        "h264 (High) (avc1 / 0x31637661)",
        "yuv420p(tv, bt709, progressive)",
        "1920x1080 [SAR 1:1 DAR 16:9]",
        "24 fps",
    ]


def test_split_top_level_empty():
    assert split_top_level("") == []
    assert split_top_level(" , ,") == []
