from kodilink.client.config import (
    ClientConfig,
    EnvironmentAddressStore,
    MemoryAddressStore,
    build_connection_url,
    resolve_connection_url,
)


class TestBuildConnectionUrl:
    def test_bare_host_gets_default_port(self):
        for address in ["192.168.0.20", "kodi.local", "localhost"]:
            assert build_connection_url(address) == f"ws://{address}:9090"

    def test_host_with_port_is_used_unchanged(self):
        for address in ["192.168.0.20:8080", "kodi.local:9090", "localhost:1"]:
            assert build_connection_url(address) == f"ws://{address}"

    def test_custom_default_port_and_scheme(self):
        # Act
        url = build_connection_url("kodi.local", default_port="9999", scheme="wss://")

        # Assert
        assert url == "wss://kodi.local:9999"


class TestResolveConnectionUrl:
    def test_reads_address_from_configured_key(self):
        # Arrange
        store = MemoryAddressStore({"playerHost": "10.0.0.5"})
        config = ClientConfig(address_key="playerHost")

        # Act & Assert
        assert resolve_connection_url(store, config) == "ws://10.0.0.5:9090"

    def test_missing_or_empty_address_resolves_to_none(self):
        config = ClientConfig()

        assert resolve_connection_url(MemoryAddressStore(), config) is None
        assert (
            resolve_connection_url(MemoryAddressStore({"kodiAddress": ""}), config)
            is None
        )


class TestMemoryAddressStore:
    def test_set_and_clear(self):
        # Arrange
        store = MemoryAddressStore()

        # Act
        store.set("kodiAddress", "10.0.0.5")
        first = store.get("kodiAddress")
        store.set("kodiAddress", None)

        # Assert
        assert first == "10.0.0.5"
        assert store.get("kodiAddress") is None


class TestEnvironmentAddressStore:
    def test_maps_camel_case_key_to_environment_variable(self, monkeypatch):
        # Arrange
        monkeypatch.setenv("KODI_ADDRESS", "10.0.0.7:9091")
        store = EnvironmentAddressStore()

        # Act & Assert
        assert store.variable_name("kodiAddress") == "KODI_ADDRESS"
        assert store.get("kodiAddress") == "10.0.0.7:9091"

    def test_prefix_is_prepended(self, monkeypatch):
        # Arrange
        monkeypatch.setenv("LIVINGROOM_KODI_ADDRESS", "10.0.0.8")
        store = EnvironmentAddressStore(prefix="LIVINGROOM_")

        # Act & Assert
        assert store.get("kodiAddress") == "10.0.0.8"

    def test_unset_variable_returns_none(self, monkeypatch):
        monkeypatch.delenv("KODI_ADDRESS", raising=False)

        assert EnvironmentAddressStore().get("kodiAddress") is None
