from django.core.management.base import BaseCommand, CommandError

from apps.currency.application.tasks import refresh_exchange_rates
from apps.currency.infrastructure.providers.registry import PROVIDER_REGISTRY


class Command(BaseCommand):
    help = 'Refresh the active exchange rates of the base currency'

    def add_arguments(self, parser):
        parser.add_argument(
            '--provider',
            dest='provider',
            type=str,
            default=None,
            help='Provider name (defaults to EXCHANGE_RATE_PROVIDER)'
        )
        parser.add_argument(
            '--sync',
            action='store_true',
            help='Execute synchronously instead of using Celery task queue'
        )

    def handle(self, **options):
        provider = options['provider']
        sync_mode = options['sync']

        if provider and provider not in PROVIDER_REGISTRY:
            choices = ", ".join(sorted(PROVIDER_REGISTRY))
            raise CommandError(f'Unknown provider "{provider}". Choose one of: {choices}')

        if sync_mode:
            self.stdout.write('Running in synchronous mode...')
            result = refresh_exchange_rates(provider)

            if result['success']:
                self.stdout.write(
                    self.style.SUCCESS(
                        f"Updated {result['rates_updated']} rates for {result['base_currency']} "
                        f"(source={result['source']})"
                    )
                )
                if result.get('errors'):
                    self.stdout.write(
                        self.style.WARNING(
                            f"Errors: {len(result['errors'])}"
                        )
                    )
            else:
                raise CommandError(f"Failed: {result.get('message', 'Unknown error')}")
        else:
            self.stdout.write('Dispatching Celery task...')
            task = refresh_exchange_rates.delay(provider)

            self.stdout.write(
                self.style.SUCCESS(
                    f'Task dispatched with ID: {task.id}'
                )
            )
