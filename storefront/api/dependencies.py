"""依存性注入コンテナ."""
from storefront.batch.session_janitor import SessionJanitor
from storefront.config import Settings
from storefront.domain.ports import (
    CartRepository,
    GuestSessionRepository,
    ProductCatalog,
    TokenValidator,
)
from storefront.domain.services import (
    CartMergeService,
    CartStateEngine,
    GuestSessionStore,
    IdentityResolver,
    KeyedLock,
)
from storefront.infrastructure.auth import JwtTokenValidator
from storefront.infrastructure.providers import InMemoryProductCatalog
from storefront.infrastructure.repositories import (
    InMemoryCartRepository,
    InMemoryGuestSessionRepository,
)
from storefront.logging_config import configure_logging


class Dependencies:
    """依存性を管理するコンテナ.

    CART_TABLE_NAME 環境変数が設定されている場合はDynamoDB実装を使用。
    そうでない場合はインメモリ実装を使用（ローカル開発・テスト用）。
    各コンポーネントはプロセス内で1度だけ組み立てる。
    """

    _settings: Settings | None = None
    _cart_repository: CartRepository | None = None
    _guest_session_repository: GuestSessionRepository | None = None
    _product_catalog: ProductCatalog | None = None
    _token_validator: TokenValidator | None = None
    _locks: KeyedLock | None = None
    _guest_session_store: GuestSessionStore | None = None
    _identity_resolver: IdentityResolver | None = None
    _cart_state_engine: CartStateEngine | None = None
    _cart_merge_service: CartMergeService | None = None
    _session_janitor: SessionJanitor | None = None

    @classmethod
    def get_settings(cls) -> Settings:
        """設定を取得する（環境変数から読み込んだ場合はログ設定も行う）."""
        if cls._settings is None:
            cls._settings = Settings.from_env()
            configure_logging(cls._settings.log_level)
        return cls._settings

    @classmethod
    def get_cart_repository(cls) -> CartRepository:
        """カートリポジトリを取得する."""
        if cls._cart_repository is None:
            settings = cls.get_settings()
            if settings.use_dynamodb:
                from storefront.infrastructure.repositories import DynamoDBCartRepository

                cls._cart_repository = DynamoDBCartRepository(settings.cart_table_name)
            else:
                cls._cart_repository = InMemoryCartRepository()
        return cls._cart_repository

    @classmethod
    def get_guest_session_repository(cls) -> GuestSessionRepository:
        """ゲストセッションリポジトリを取得する."""
        if cls._guest_session_repository is None:
            settings = cls.get_settings()
            if settings.use_dynamodb:
                from storefront.infrastructure.repositories import DynamoDBGuestSessionRepository

                cls._guest_session_repository = DynamoDBGuestSessionRepository(
                    settings.guest_session_table_name
                )
            else:
                cls._guest_session_repository = InMemoryGuestSessionRepository()
        return cls._guest_session_repository

    @classmethod
    def get_product_catalog(cls) -> ProductCatalog | None:
        """商品カタログを取得する（未設定なら商品の存在確認をしない）."""
        return cls._product_catalog

    @classmethod
    def get_token_validator(cls) -> TokenValidator:
        """資格情報検証を取得する."""
        if cls._token_validator is None:
            settings = cls.get_settings()
            cls._token_validator = JwtTokenValidator(settings.jwt_secret, settings.jwt_algorithm)
        return cls._token_validator

    @classmethod
    def get_guest_session_store(cls) -> GuestSessionStore:
        """ゲストセッションストアを取得する."""
        if cls._guest_session_store is None:
            cls._guest_session_store = GuestSessionStore(
                cls.get_guest_session_repository(),
                ttl=cls.get_settings().guest_session_ttl,
            )
        return cls._guest_session_store

    @classmethod
    def get_identity_resolver(cls) -> IdentityResolver:
        """主体解決を取得する."""
        if cls._identity_resolver is None:
            cls._identity_resolver = IdentityResolver(
                cls.get_token_validator(),
                cls.get_guest_session_store(),
            )
        return cls._identity_resolver

    @classmethod
    def get_cart_state_engine(cls) -> CartStateEngine:
        """カート状態エンジンを取得する."""
        if cls._cart_state_engine is None:
            settings = cls.get_settings()
            if cls._locks is None:
                cls._locks = KeyedLock()
            cls._cart_state_engine = CartStateEngine(
                cls.get_cart_repository(),
                cls.get_product_catalog(),
                max_line_quantity=settings.cart_max_line_quantity,
                max_attempts=settings.cart_max_write_attempts,
                retry_base_delay=settings.cart_retry_base_delay_seconds,
                locks=cls._locks,
            )
        return cls._cart_state_engine

    @classmethod
    def get_cart_merge_service(cls) -> CartMergeService:
        """カート移行サービスを取得する."""
        if cls._cart_merge_service is None:
            cls._cart_merge_service = CartMergeService(
                cls.get_cart_state_engine(),
                cls.get_guest_session_store(),
            )
        return cls._cart_merge_service

    @classmethod
    def get_session_janitor(cls) -> SessionJanitor:
        """清掃ジョブを取得する."""
        if cls._session_janitor is None:
            settings = cls.get_settings()
            cls._session_janitor = SessionJanitor(
                cls.get_guest_session_repository(),
                cls.get_cart_repository(),
                cls.get_cart_state_engine(),
                batch_size=settings.session_cleanup_batch_size,
                interval=settings.cleanup_interval,
                orphan_cart_max_age=settings.orphan_cart_max_age,
                stale_migration_max_age=settings.stale_migration_max_age,
            )
        return cls._session_janitor

    @classmethod
    def set_settings(cls, settings: Settings) -> None:
        """設定を差し替える（テスト用）."""
        cls._settings = settings

    @classmethod
    def set_cart_repository(cls, repository: CartRepository) -> None:
        """カートリポジトリを設定する（テスト用）."""
        cls._cart_repository = repository

    @classmethod
    def set_guest_session_repository(cls, repository: GuestSessionRepository) -> None:
        """ゲストセッションリポジトリを設定する（テスト用）."""
        cls._guest_session_repository = repository

    @classmethod
    def set_product_catalog(cls, catalog: ProductCatalog | None) -> None:
        """商品カタログを設定する."""
        cls._product_catalog = catalog

    @classmethod
    def set_token_validator(cls, validator: TokenValidator) -> None:
        """資格情報検証を設定する（テスト用）."""
        cls._token_validator = validator

    @classmethod
    def reset(cls) -> None:
        """全ての依存性をリセットする（テスト用）."""
        cls._settings = None
        cls._cart_repository = None
        cls._guest_session_repository = None
        cls._product_catalog = None
        cls._token_validator = None
        cls._locks = None
        cls._guest_session_store = None
        cls._identity_resolver = None
        cls._cart_state_engine = None
        cls._cart_merge_service = None
        cls._session_janitor = None
