"""
Tests for turning reach estimate responses into rows and tables.
"""

import math

import pytest

from fb_reach.data_acquisition.targeting_specs import bundled_spec
from fb_reach.errors import MalformedResponseError, MissingEstimateError
from fb_reach.processing.data_formatters.facebook_formatter import (
    ResultRow,
    Scalar,
    ValueList,
    collapse_values,
    combine_rows,
    extract_users,
    flatten_targeting_spec,
    process_reach_response,
)
from tests.conftest import make_response


def test_single_country_row():
    spec = '{"geo_locations":{"countries":["US"]}}'
    response = make_response({"data": {"users": 180000000}})

    row = process_reach_response(spec, response)

    assert row.columns == {"countries": Scalar("US")}
    assert row.users == 180000000
    assert row.to_record() == {"countries": "US", "users": 180000000}


def test_two_countries_keep_both_in_order():
    spec = '{"geo_locations": {"countries": ["US", "GB"]}, "genders": [2]}'

    row = process_reach_response(spec, make_response({"data": {"users": 1000}}))

    assert row.columns["countries"] == ValueList(("US", "GB"))
    assert row.columns["genders"] == Scalar(2)
    assert row.to_record()["countries"] == ["US", "GB"]


def test_estimate_equals_stubbed_users():
    for users in (0, 1, 520000, 2_000_000_000):
        row = process_reach_response(
            '{"geo_locations": {"countries": ["CA"]}}',
            make_response({"data": {"users": users, "estimate_ready": True}}),
        )
        assert row.users == users


def test_flatten_region_objects_use_dotted_names():
    columns = flatten_targeting_spec(bundled_spec("targeting_spec_01"))

    assert columns == {
        "regions.key": Scalar("3890"),
        "age_min": Scalar(20),
        "age_max": Scalar(30),
        "genders": Scalar(1),
    }


def test_flatten_complex_spec():
    columns = flatten_targeting_spec(bundled_spec("targeting_spec_03"))

    assert columns["countries"] == ValueList(("US", "GB"))
    assert columns["relationship_statuses"] == ValueList((2, 3))
    assert columns["education_statuses"] == ValueList((2, 3))
    assert columns["age_min"] == Scalar(25)
    assert columns["genders"] == Scalar(2)


def test_flatten_several_regions():
    spec = {
        "geo_locations": {"regions": [{"key": "3890"}, {"key": "3880"}]},
        "age_min": 18,
    }

    columns = flatten_targeting_spec(spec)

    assert columns["regions.key"] == ValueList(("3890", "3880"))


def test_collapse_values():
    assert collapse_values(["US", "US"]) == Scalar("US")
    assert collapse_values(["US", "GB", "US"]) == ValueList(("US", "GB"))
    assert collapse_values([]) == ValueList(())
    assert collapse_values([{"key": "1"}, {"key": "1"}]) == Scalar({"key": "1"})


def test_api_error_is_a_missing_estimate():
    response = make_response({"error": {"message": "Invalid parameter"}}, 400)

    with pytest.raises(MissingEstimateError) as exc_info:
        process_reach_response('{"geo_locations":{"countries":["US"]}}', response)

    error = exc_info.value
    assert "Invalid parameter" in str(error)
    assert error.api_error == {"message": "Invalid parameter"}
    assert error.status_code == 400
    assert not error.rate_limited


def test_missing_estimate_is_a_lookup_error():
    with pytest.raises(LookupError):
        extract_users({"data": {}})


def test_null_users_is_not_a_row():
    with pytest.raises(MissingEstimateError):
        extract_users({"data": {"users": None}})


def test_rate_limit_errors_are_flagged():
    body = {
        "error": {
            "message": "User request limit reached",
            "type": "OAuthException",
            "code": 17,
        }
    }

    with pytest.raises(MissingEstimateError) as exc_info:
        extract_users(body, status_code=400)

    assert exc_info.value.rate_limited
    assert exc_info.value.error_code == 17


def test_non_json_body():
    response = make_response("<html>Bad Gateway</html>", 502)

    with pytest.raises(MalformedResponseError):
        process_reach_response('{"geo_locations":{"countries":["US"]}}', response)


def test_combine_rows_men_and_women():
    men = process_reach_response(
        '{"geo_locations":{"countries":["US"]},"age_min":20,"age_max":30,"genders":[1]}',
        make_response({"data": {"users": 500000}}),
    )
    women = process_reach_response(
        '{"geo_locations":{"countries":["US"]},"age_min":20,"age_max":30,"genders":[2]}',
        make_response({"data": {"users": 520000}}),
    )

    table = combine_rows([men, women])

    assert list(table.columns) == ["countries", "age_min", "age_max", "genders", "users"]
    assert len(table) == 2
    assert table["countries"].tolist() == ["US", "US"]
    assert table["age_min"].tolist() == [20, 20]
    assert table["genders"].tolist() == [1, 2]
    assert table["users"].tolist() == [500000, 520000]


def test_combine_rows_unions_columns():
    rows = [
        ResultRow(columns={"countries": Scalar("US")}, users=10),
        ResultRow(
            columns={"countries": ValueList(("US", "GB")), "genders": Scalar(2)},
            users=20,
        ),
    ]

    table = combine_rows(rows)

    assert list(table.columns) == ["countries", "genders", "users"]
    assert table.loc[0, "countries"] == "US"
    assert table.loc[1, "countries"] == ["US", "GB"]
    assert math.isnan(table.loc[0, "genders"])


def test_combine_no_rows():
    table = combine_rows([])
    assert table.empty
    assert list(table.columns) == ["users"]


def test_collapse_keeps_values_of_different_types_apart():
    assert collapse_values([1, True]) == ValueList((1, True))
    assert collapse_values([1, 1.0]) == ValueList((1, 1.0))
    assert collapse_values([2, 2]) == Scalar(2)


@pytest.mark.parametrize("users", ["lots", [1], {"n": 1}, True])
def test_non_numeric_users_is_malformed(users):
    with pytest.raises(MalformedResponseError):
        extract_users({"data": {"users": users}})
