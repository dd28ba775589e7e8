import pytest

from staffdesk.client.listing import Contains, count_by, filter_and_sort

DOCUMENTS = [
    {"id": 1, "name": "Passport", "type": "ID", "verificationStatus": "pending", "employeeName": "Eli", "createdAt": "2024-03-01T10:00:00Z"},
    {"id": 2, "name": "contract", "type": "Contract", "verificationStatus": "verified", "employeeName": "Ada", "createdAt": "2024-01-15T08:00:00Z"},
    {"id": 3, "name": "Visa", "type": "ID", "verificationStatus": "rejected", "employeeName": "eliza", "createdAt": None},
    {"id": 4, "name": "Degree", "type": "Certificate", "verificationStatus": "pending", "employeeName": "Bo", "createdAt": "2024-02-10T12:30:00"},
]


def test_all_and_empty_values_do_not_filter():
    rows = filter_and_sort(DOCUMENTS, {"type": "all", "verificationStatus": "", "employeeName": None})

    assert [r["id"] for r in rows] == [1, 2, 3, 4]


def test_exact_and_substring_filters_combine():
    rows = filter_and_sort(DOCUMENTS, {"type": "ID", "employeeName": Contains("ELI")})

    assert [r["id"] for r in rows] == [1, 3]


def test_either_field_and_any_of_filters():
    assert [r["id"] for r in filter_and_sort(DOCUMENTS, {"name|employeeName": Contains("bo")})] == [4]
    assert [r["id"] for r in filter_and_sort(DOCUMENTS, {"verificationStatus": ["verified", "rejected"]})] == [2, 3]


def test_dates_sort_chronologically_with_missing_as_epoch():
    newest_first = filter_and_sort(DOCUMENTS, sort_by="createdAt", order="desc")
    oldest_first = filter_and_sort(DOCUMENTS, sort_by="createdAt", order="asc")

    assert [r["id"] for r in newest_first] == [1, 4, 2, 3]
    assert [r["id"] for r in oldest_first] == [3, 2, 4, 1]


def test_strings_sort_case_insensitively_and_input_is_untouched():
    original = list(DOCUMENTS)

    rows = filter_and_sort(DOCUMENTS, sort_by="name", order="asc")

    assert [r["name"] for r in rows] == ["contract", "Degree", "Passport", "Visa"]
    assert DOCUMENTS == original


def test_sort_is_stable_for_equal_keys():
    rows = filter_and_sort(DOCUMENTS, sort_by="type", order="asc")

    assert [r["id"] for r in rows] == [4, 2, 1, 3]


def test_nested_fields_and_bad_order():
    records = [{"id": 1, "overtime": {"hours": 3}}, {"id": 2, "overtime": {"hours": 1}}]

    assert [r["id"] for r in filter_and_sort(records, sort_by="overtime.hours", order="asc")] == [2, 1]
    with pytest.raises(ValueError):
        filter_and_sort(records, sort_by="id", order="sideways")


def test_count_by_tallies_statuses():
    assert count_by(DOCUMENTS, "verificationStatus") == {"pending": 2, "verified": 1, "rejected": 1}


def test_mixed_numbers_and_strings_sort_without_error():
    records = [{"id": 1, "v": "abc"}, {"id": 2, "v": 3}, {"id": 3, "v": None}, {"id": 4, "v": 1.5}]

    ascending = filter_and_sort(records, sort_by="v", order="asc")
    descending = filter_and_sort(records, sort_by="v", order="desc")

    assert [r["id"] for r in ascending] == [4, 2, 1, 3]
    assert [r["id"] for r in descending] == [3, 1, 2, 4]
