# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import cached_property

from gym_backend.application.services.password_hashing import WerkzeugPasswordHasher
from gym_backend.application.services.token_pairs import TokenPairIssuer
from gym_backend.application.services.token_service import JwtTokenService
from gym_backend.application.use_cases.auth.change_password import ChangeClientPasswordUseCase
from gym_backend.application.use_cases.auth.create_client import CreateClientUseCase
from gym_backend.application.use_cases.auth.login import LoginUseCase
from gym_backend.application.use_cases.auth.logout import LogoutUseCase
from gym_backend.application.use_cases.auth.refresh_token import RefreshTokenUseCase
from gym_backend.application.use_cases.auth.register_trainer import RegisterTrainerUseCase
from gym_backend.infrastructure.repositories.auth.sqlalchemy_principal_repository import (
    SqlAlchemyPrincipalRepository,
    SqlAlchemyRefreshTokenRepository,
)
from gym_backend.interfaces.http.controllers.auth_controller import AuthController
from gym_backend.interfaces.http.controllers.clients_controller import ClientsController
from gym_backend.interfaces.http.controllers.misc_controller import MiscController
from gym_backend.shared.config import AppConfig, load_config


class Container:
    def __init__(self, config: AppConfig | None = None) -> None:
        self._config = config or load_config()

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher()

    @cached_property
    def token_service(self) -> JwtTokenService:
        return JwtTokenService.from_config(self._config)

    @cached_property
    def principal_repository(self) -> SqlAlchemyPrincipalRepository:
        return SqlAlchemyPrincipalRepository()

    @cached_property
    def refresh_token_repository(self) -> SqlAlchemyRefreshTokenRepository:
        return SqlAlchemyRefreshTokenRepository()

    @cached_property
    def token_pair_issuer(self) -> TokenPairIssuer:
        return TokenPairIssuer(
            tokens=self.token_service,
            refresh_tokens=self.refresh_token_repository,
        )

    # Auth use cases

    @cached_property
    def login_use_case(self) -> LoginUseCase:
        return LoginUseCase(
            principals=self.principal_repository,
            password_hasher=self.password_hasher,
            issuer=self.token_pair_issuer,
        )

    @cached_property
    def register_trainer_use_case(self) -> RegisterTrainerUseCase:
        return RegisterTrainerUseCase(
            principals=self.principal_repository,
            password_hasher=self.password_hasher,
            issuer=self.token_pair_issuer,
        )

    @cached_property
    def refresh_token_use_case(self) -> RefreshTokenUseCase:
        return RefreshTokenUseCase(
            tokens=self.token_service,
            refresh_tokens=self.refresh_token_repository,
            principals=self.principal_repository,
            issuer=self.token_pair_issuer,
            rotate=self._config.auth.rotate_refresh_tokens,
        )

    @cached_property
    def logout_use_case(self) -> LogoutUseCase:
        return LogoutUseCase(
            tokens=self.token_service,
            refresh_tokens=self.refresh_token_repository,
        )

    # Client management use cases

    @cached_property
    def create_client_use_case(self) -> CreateClientUseCase:
        return CreateClientUseCase(
            principals=self.principal_repository,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def change_client_password_use_case(self) -> ChangeClientPasswordUseCase:
        return ChangeClientPasswordUseCase(
            principals=self.principal_repository,
            password_hasher=self.password_hasher,
        )

    # Controllers

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            login_use_case=self.login_use_case,
            register_use_case=self.register_trainer_use_case,
            refresh_use_case=self.refresh_token_use_case,
            logout_use_case=self.logout_use_case,
            principals=self.principal_repository,
        )

    @cached_property
    def clients_controller(self) -> ClientsController:
        return ClientsController(
            create_client_use_case=self.create_client_use_case,
            change_password_use_case=self.change_client_password_use_case,
        )

    @cached_property
    def misc_controller(self) -> MiscController:
        return MiscController()


container = Container()
