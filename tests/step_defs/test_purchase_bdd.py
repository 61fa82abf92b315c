"""
BDD step definitions for purchases: credits are conserved and failures leave no trace.
"""

from pytest_bdd import given, parsers, scenarios, then, when

scenarios("../features/purchase.feature")


@given(parsers.parse('a category "{category}" with an item "{name}" priced {price:d}'))
def category_with_item(api, context, category, name, price):
    r = api.post(
        "/api/v1/categories",
        data={"name": category, "user_id": "1", "image": "https://cdn.test/cat.png"},
    )
    assert r.status_code == 201, r.text
    r = api.post(
        "/api/v1/items",
        data={
            "name": name,
            "description": f"{name} for sale",
            "price": str(price),
            "categories": str(r.json()["id"]),
            "user_id": "1",
            "image": "https://cdn.test/item.png",
        },
    )
    assert r.status_code == 201, r.text
    context["items"][name] = r.json()["id"]


@given(parsers.parse("forum user {user_id:d} has {credits:d} credits"))
def user_with_credits(api, user_id, credits):
    # First read registers the user
    assert api.get("/api/v1/inventory", params={"user_id": user_id}).status_code == 200
    r = api.put("/api/v1/users/credits", json={"user_id": user_id, "credits": credits})
    assert r.status_code == 200, r.text


@when(parsers.parse('user {user_id:d} buys {quantity:d} of "{name}" at {price:d}'))
def buy(api, context, user_id, quantity, name, price):
    context["response"] = api.post(
        "/api/v1/purchases",
        json={
            "user_id": user_id,
            "items": [{"item_id": context["items"][name], "quantity": quantity, "price": price}],
        },
    )


@then(parsers.parse("user {user_id:d} should have {credits:d} credits"))
def user_credits(api, user_id, credits):
    r = api.get("/api/v1/inventory", params={"user_id": user_id})
    assert r.json()["credits"] == credits


@then(parsers.parse('user {user_id:d} should own {quantity:d} of "{name}"'))
def user_owns(api, context, user_id, quantity, name):
    r = api.get("/api/v1/inventory", params={"user_id": user_id})
    owned = {
        entry["id"]: entry["total_quantity"] for entry in r.json()["inventory"]
    }
    assert owned.get(context["items"][name], 0) == quantity
