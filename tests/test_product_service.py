import pytest

from app.schemas import Product, ProductWrite
from app.services.v1 import ProductService, filter_products
from fakes import FakeClinicApi, upstream_error

V1 = "/api/v1/products"
LEGACY = "/api/products"

PRODUCTS = [
    {"id": 1, "name": "Luva de procedimento", "category": "medical_supply", "current_stock": 40, "min_stock": 10, "is_active": True, "barcode": "7891000"},
    {"id": 2, "name": "Seringa 5ml", "category": "medical_supply", "supplier": "MedSul", "current_stock": 0, "is_active": False},
    {"id": 3, "name": "Dipirona", "category": "medication", "description": "Analgésico", "current_stock": 3, "min_stock": 5},
]


@pytest.mark.asyncio
async def test_list_uses_v1_when_available():
    api = FakeClinicApi()
    api.responses[("GET", V1)] = PRODUCTS

    outcome = await ProductService(api).list_products()

    assert outcome.success
    assert [p.id for p in outcome.products] == [1, 2, 3]
    assert [c[1] for c in api.calls] == [V1]


@pytest.mark.asyncio
async def test_list_falls_back_to_legacy_once():
    api = FakeClinicApi()
    api.failures[("GET", V1)] = upstream_error(404, "Not Found")
    api.responses[("GET", LEGACY)] = PRODUCTS[:1]

    outcome = await ProductService(api).list_products()

    assert [p.id for p in outcome.products] == [1]
    assert [c[1] for c in api.calls] == [V1, LEGACY]


@pytest.mark.asyncio
async def test_list_reports_error_when_both_paths_fail():
    api = FakeClinicApi()
    api.failures[("GET", V1)] = upstream_error(404, "Not Found")
    api.failures[("GET", LEGACY)] = upstream_error(500, "boom")

    outcome = await ProductService(api).list_products()

    assert not outcome.success
    assert outcome.products == []
    assert outcome.notifications[0].title == "Could not load products"


def test_search_and_category_filter():
    products = [Product.model_validate(p) for p in PRODUCTS]
    assert [p.id for p in filter_products(products, "LUVA")] == [1]
    assert [p.id for p in filter_products(products, "medsul")] == [2]
    assert [p.id for p in filter_products(products, "analg")] == [3]
    assert [p.id for p in filter_products(products, "78910")] == [1]
    assert [p.id for p in filter_products(products, category="medication")] == [3]
    assert [p.id for p in filter_products(products, category="all")] == [1, 2, 3]


def test_stock_status():
    by_id = {p["id"]: Product.model_validate(p) for p in PRODUCTS}
    assert by_id[1].effective_stock_status == "normal"
    assert by_id[2].effective_stock_status == "out_of_stock"
    assert by_id[3].effective_stock_status == "low_stock"
    assert by_id[2].model_dump()["effective_stock_status"] == "out_of_stock"


@pytest.mark.asyncio
async def test_create_falls_back_and_reloads():
    api = FakeClinicApi()
    api.failures[("POST", V1)] = upstream_error(405, "Method Not Allowed")
    api.responses[("GET", V1)] = PRODUCTS

    outcome = await ProductService(api).create(ProductWrite(name="Gaze", category="medical_supply"))

    assert outcome.success
    assert outcome.status_code == 201
    assert [c[:2] for c in api.calls] == [("POST", V1), ("POST", LEGACY), ("GET", V1)]
    assert api.calls[1][2]["unit_of_measure"] == "unidade"


@pytest.mark.asyncio
async def test_delete_failure_on_both_paths():
    api = FakeClinicApi()
    api.failures[("DELETE", f"{V1}/9")] = upstream_error(404, "Not Found")
    api.failures[("DELETE", f"{LEGACY}/9")] = upstream_error(404, "Produto não encontrado")

    outcome = await ProductService(api).delete(9)

    assert not outcome.success
    assert outcome.status_code == 404
    assert outcome.notifications[0].description == "Produto não encontrado"
    assert outcome.products is None


@pytest.mark.asyncio
async def test_toggle_active_flips_current_value():
    api = FakeClinicApi()
    api.responses[("GET", V1)] = PRODUCTS

    outcome = await ProductService(api).toggle_active(2)

    assert outcome.success
    assert api.calls_to("PUT") == [("PUT", f"{V1}/2", {"is_active": True})]
    assert outcome.notifications[0].title == "Product activated"


@pytest.mark.asyncio
async def test_toggle_unknown_product():
    api = FakeClinicApi()
    api.responses[("GET", V1)] = PRODUCTS
    outcome = await ProductService(api).toggle_active(42)
    assert outcome.status_code == 404
    assert api.calls_to("PUT") == []
