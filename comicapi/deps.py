from typing import Callable

from dependency_injector.wiring import Provider, inject
from fastapi import Depends
from sqlalchemy.orm import Session

from comicapi.containers import Container
from comicapi.database.session import get_db
from comicapi.services.auth_service import AuthService
from comicapi.services.chapter_service import ChapterService
from comicapi.services.currency_service import CurrencyService
from comicapi.services.payment_service import PaymentService

# 컨테이너의 Factory 에 요청 단위 세션을 바인딩한다.


@inject
def get_auth_service(
    db: Session = Depends(get_db),
    factory: Callable[..., AuthService] = Depends(
        Provider[Container.services.auth_service]
    ),
) -> AuthService:
    return factory(db=db)


@inject
def get_chapter_service(
    db: Session = Depends(get_db),
    factory: Callable[..., ChapterService] = Depends(
        Provider[Container.services.chapter_service]
    ),
) -> ChapterService:
    return factory(db=db)


@inject
def get_payment_service(
    db: Session = Depends(get_db),
    factory: Callable[..., PaymentService] = Depends(
        Provider[Container.services.payment_service]
    ),
) -> PaymentService:
    return factory(db=db)


@inject
def get_currency_service(
    db: Session = Depends(get_db),
    factory: Callable[..., CurrencyService] = Depends(
        Provider[Container.services.currency_service]
    ),
) -> CurrencyService:
    return factory(db=db)
