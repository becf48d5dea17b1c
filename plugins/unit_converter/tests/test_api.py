import pytest

from app import create_app


def _convert(client, **overrides):
    body = {
        "value": 1,
        "from_unit": "meters",
        "to_unit": "feet",
        "conversion_type": "length",
    }
    body.update(overrides)
    return client.post("/convert", json=body)


def test_convert_endpoint_returns_top_level_result(client):
    response = _convert(
        client,
        value=0,
        from_unit="Celsius",
        to_unit="Fahrenheit",
        conversion_type="temperature",
    )
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["result"] == 32
    assert payload["data"]["formatted"] == "32"
    assert payload["data"]["to_unit"] == "Fahrenheit"


def test_convert_endpoint_length(client):
    response = _convert(client)
    assert response.status_code == 200
    assert response.get_json()["result"] == pytest.approx(3.28084, abs=1e-3)


def test_convert_endpoint_accepts_numeric_string_and_precision(client):
    response = _convert(
        client,
        value="1",
        from_unit="cups",
        to_unit="ml",
        conversion_type="cooking",
        decimals=1,
    )
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["result"] == pytest.approx(236.588, abs=1e-1)
    assert payload["data"]["formatted"] == "236.6"


def test_convert_endpoint_rejects_unit_outside_category(client):
    response = _convert(client, value=5, from_unit="inches", to_unit="Celsius")
    assert response.status_code == 400
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "unit.invalid_unit"


def test_convert_endpoint_rejects_unknown_category(client):
    response = _convert(client, conversion_type="volume")
    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == "unit.invalid_category"


def test_convert_endpoint_rejects_non_finite_value(client):
    response = client.post(
        "/convert",
        data='{"value": NaN, "from_unit": "kg", "to_unit": "grams",'
        ' "conversion_type": "weight"}',
        content_type="application/json",
    )
    assert response.status_code == 422
    assert response.get_json()["error"]["code"] == "unit.invalid_value"


@pytest.mark.parametrize(
    "body",
    [
        {"from_unit": "kg", "to_unit": "grams", "conversion_type": "weight"},
        {
            "value": None,
            "from_unit": "kg",
            "to_unit": "grams",
            "conversion_type": "weight",
        },
        {
            "value": True,
            "from_unit": "kg",
            "to_unit": "grams",
            "conversion_type": "weight",
        },
        {
            "value": 1,
            "from_unit": "kg",
            "to_unit": "grams",
            "conversion_type": "weight",
            "unexpected": "field",
        },
        [1, 2, 3],
    ],
)
def test_convert_endpoint_rejects_malformed_payload(client, body):
    response = client.post("/convert", json=body)
    assert response.status_code == 400
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "unit.invalid_request"


def test_convert_endpoint_rejects_non_json_body(client):
    response = client.post("/convert", data="value=1", content_type="text/plain")
    assert response.status_code == 400


def test_convert_endpoint_honours_non_negative_setting():
    app = create_app(
        "TestingConfig",
        config_overrides={
            "PLUGIN_SETTINGS": {
                "unit_converter": {"non_negative_categories": ["weight"]}
            }
        },
    )
    client = app.test_client()
    response = _convert(
        client, value=-1, from_unit="kg", to_unit="pounds", conversion_type="weight"
    )
    assert response.status_code == 422
    response = _convert(
        client,
        value=-1,
        from_unit="Celsius",
        to_unit="Kelvin",
        conversion_type="temperature",
    )
    assert response.status_code == 200


def test_negative_values_accepted_by_default(client):
    response = _convert(
        client, value=-2, from_unit="kg", to_unit="grams", conversion_type="weight"
    )
    assert response.status_code == 200
    assert response.get_json()["result"] == pytest.approx(-2000)


def test_categories_endpoint_lists_units(client):
    response = client.get("/categories")
    assert response.status_code == 200
    categories = response.get_json()["data"]["categories"]
    assert [item["type"] for item in categories] == [
        "length",
        "weight",
        "cooking",
        "temperature",
    ]
    assert categories[0]["units"] == ["inches", "cm", "feet", "meters"]
    assert categories[0]["default_units"] == ["inches", "cm"]


def test_units_endpoint(client):
    response = client.get("/categories/temperature/units")
    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["units"] == ["Celsius", "Fahrenheit", "Kelvin"]
    assert data["default_units"] == ["Celsius", "Fahrenheit"]


def test_units_endpoint_unknown_category(client):
    response = client.get("/categories/speed/units")
    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == "unit.unknown_category"


@pytest.mark.parametrize(
    "precision",
    [
        {"decimals": 10**19},
        {"decimals": 50_000_000},
        {"decimals": -1},
        {"sig_figs": 10**19, "notation": "scientific"},
        {"sig_figs": 0},
    ],
)
def test_convert_endpoint_rejects_unbounded_precision(client, precision):
    response = _convert(client, **precision)
    assert response.status_code == 400
    payload = response.get_json()
    assert payload["error"]["code"] == "unit.invalid_request"
    assert len(response.get_data()) < 4096


def test_convert_endpoint_engineering_notation_for_tiny_value(client):
    response = _convert(
        client,
        value=5e-324,
        from_unit="meters",
        to_unit="meters",
        notation="engineering",
    )
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["result"] == 5e-324
    assert payload["data"]["formatted"] == "5e-324"
