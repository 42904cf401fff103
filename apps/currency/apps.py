from django.apps import AppConfig
from django.conf import settings


class CurrencyConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.currency"
    label = "currency"
    verbose_name = "Currency"

    def ready(self):
        from apps.currency.domain.rates import PairLockRegistry, RateCache

        # One cache and one lock registry per process, shared by every store.
        self.rate_cache = RateCache(ttl_seconds=settings.EXCHANGE_RATE_CACHE_TTL)
        self.pair_locks = PairLockRegistry()
