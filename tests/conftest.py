import pytest
from django.apps import apps


@pytest.fixture(autouse=True)
def clear_rate_cache():
    """The rate cache lives for the whole process; start every test cold."""
    apps.get_app_config("currency").rate_cache.clear()
    yield
    apps.get_app_config("currency").rate_cache.clear()
