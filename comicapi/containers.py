from dependency_injector import containers, providers

from comicapi.config import get_settings
from comicapi.core.security import TokenService
from comicapi.services.auth_service import AuthService
from comicapi.services.chapter_service import ChapterService
from comicapi.services.currency_service import CurrencyService
from comicapi.services.mail_service import MailService
from comicapi.services.payment_service import PaymentService


class ConfigModule(containers.DeclarativeContainer):
    """Application configuration."""

    config = providers.Singleton(get_settings)


class CoreModule(containers.DeclarativeContainer):
    """Process-wide stateless collaborators."""

    config = providers.DependenciesContainer()

    token_service = providers.Singleton(TokenService, settings=config.config)
    mail_service = providers.Singleton(MailService, settings=config.config)


class ServiceModule(containers.DeclarativeContainer):
    """Service layer dependencies.

    db 세션은 요청마다 deps.py 에서 factory(db=...) 로 주입된다.
    """

    config = providers.DependenciesContainer()
    core = providers.DependenciesContainer()

    auth_service = providers.Factory(
        AuthService,
        settings=config.config,
        token_service=core.token_service,
        mail_service=core.mail_service,
    )
    chapter_service = providers.Factory(ChapterService)
    payment_service = providers.Factory(PaymentService)
    currency_service = providers.Factory(CurrencyService)


class Container(containers.DeclarativeContainer):
    """Application container."""

    wiring_config = containers.WiringConfiguration(
        modules=[
            "comicapi.deps",
            "comicapi.core.auth_middleware",
        ],
    )

    config = providers.Container(ConfigModule)
    core = providers.Container(CoreModule, config=config)
    services = providers.Container(
        ServiceModule, config=config, core=core
    )
