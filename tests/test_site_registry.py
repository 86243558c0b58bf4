"""Tests for the site registry."""

import asyncio
import json

import pytest
from wpmcp.errors import ConflictError, NotFoundError, ValidationError
from wpmcp.sites import SiteRegistry, SiteRecord, normalize_url


class TestNormalizeUrl:
    def test_trailing_slash(self):
        assert normalize_url("https://blog.example.com/") == "https://blog.example.com"

    def test_case_of_scheme_and_host(self):
        assert normalize_url("HTTPS://Blog.Example.COM") == "https://blog.example.com"

    def test_path_case_preserved(self):
        assert normalize_url("https://example.com/WP/") == "https://example.com/WP"

    def test_only_one_slash_stripped(self):
        assert normalize_url("https://example.com/blog//") == "https://example.com/blog/"


class TestAdd:
    async def test_add_then_lookup(self, registry):
        site = await registry.add({"name": "Blog", "url": "https://blog.example.com/"})
        assert site.id
        assert site.url == "https://blog.example.com"
        assert site.created_at and site.updated_at
        assert registry.get_by_id(site.id) == site
        assert registry.get_by_name("Blog") == site
        assert registry.get_by_url("HTTPS://BLOG.example.com/") == site

    async def test_requires_name_and_url(self, registry):
        with pytest.raises(ValidationError):
            await registry.add({"url": "https://blog.example.com"})
        with pytest.raises(ValidationError):
            await registry.add({"name": "Blog"})

    @pytest.mark.parametrize("site", [
        {"name": "Blog", "url": 123},
        {"name": ["Blog"], "url": "https://blog.example.com"},
        {"name": "Blog", "url": "https://blog.example.com", "username": 7},
    ])
    async def test_non_string_fields(self, registry, site):
        with pytest.raises(ValidationError) as exc:
            await registry.add(site)
        assert "must be a string" in exc.value.message
        assert registry.all() == []

    async def test_duplicate_name(self, registry):
        await registry.add({"name": "Blog", "url": "https://one.example.com"})
        with pytest.raises(ConflictError) as exc:
            await registry.add({"name": "Blog", "url": "https://two.example.com"})
        assert "already exists" in exc.value.message

    @pytest.mark.parametrize("url", [
        "https://blog.example.com/",
        "HTTPS://BLOG.EXAMPLE.COM",
    ])
    async def test_duplicate_url(self, registry, url):
        await registry.add({"name": "Blog", "url": "https://blog.example.com"})
        with pytest.raises(ConflictError):
            await registry.add({"name": "Other", "url": url})

    async def test_keeps_given_id(self, registry):
        site = await registry.add({"id": "site-1", "name": "Blog", "url": "https://blog.example.com"})
        assert site.id == "site-1"

    async def test_persisted(self, registry, store):
        site = await registry.add({"name": "Blog", "url": "https://blog.example.com", "applicationPassword": "pw"})
        doc = json.loads(store.path.read_text())
        assert doc["sites"][0]["id"] == site.id
        assert doc["sites"][0]["applicationPassword"] == "pw"
        assert SiteRegistry(store).get_by_name("Blog") == site

    async def test_concurrent_adds_all_persisted(self, registry, store):
        await asyncio.gather(*[
            registry.add({"name": f"Site {i}", "url": f"https://site{i}.example.com"})
            for i in range(10)
        ])
        assert len(registry.all()) == 10
        assert len(SiteRegistry(store).all()) == 10


class TestUpdate:
    async def test_merge(self, registry):
        site = await registry.add({"name": "Blog", "url": "https://blog.example.com", "username": "admin"})
        updated = await registry.update(site.id, {"name": "Renamed", "username": None, "bogus": 1})
        assert updated.name == "Renamed"
        assert updated.username == "admin"
        assert updated.created_at == site.created_at
        assert registry.get_by_name("Blog") is None

    async def test_unknown(self, registry):
        with pytest.raises(NotFoundError):
            await registry.update("missing", {"name": "x"})

    async def test_conflict_with_other(self, registry):
        await registry.add({"name": "One", "url": "https://one.example.com"})
        two = await registry.add({"name": "Two", "url": "https://two.example.com"})
        with pytest.raises(ConflictError):
            await registry.update(two.id, {"url": "https://ONE.example.com/"})

    @pytest.mark.parametrize("patch", [{"name": 1}, {"url": {"href": "x"}}])
    async def test_non_string_fields(self, registry, patch):
        site = await registry.add({"name": "One", "url": "https://one.example.com"})
        with pytest.raises(ValidationError):
            await registry.update(site.id, patch)
        assert registry.get_by_id(site.id) == site

    async def test_same_name_on_self_is_fine(self, registry):
        site = await registry.add({"name": "One", "url": "https://one.example.com"})
        updated = await registry.update(site.id, {"name": "One"})
        assert updated.name == "One"


class TestActiveSite:
    async def test_none_before_select(self, registry):
        await registry.add({"name": "Blog", "url": "https://blog.example.com"})
        assert registry.get_active() is None

    async def test_select(self, registry, store):
        site = await registry.add({"name": "Blog", "url": "https://blog.example.com"})
        await registry.set_active(site.id)
        assert registry.get_active() == site
        assert SiteRegistry(store).get_active() == site

    async def test_select_unknown(self, registry):
        with pytest.raises(NotFoundError):
            await registry.set_active("missing")

    async def test_remove_clears_active(self, registry, store):
        site = await registry.add({"name": "Blog", "url": "https://blog.example.com"})
        await registry.set_active(site.id)
        assert await registry.remove(site.id) is True
        assert registry.get_by_id(site.id) is None
        assert registry.get_active() is None
        assert "activeSiteId" not in json.loads(store.path.read_text())

    async def test_remove_unknown(self, registry):
        assert await registry.remove("missing") is False


class TestSiteRecord:
    def test_public_dict_strips_secrets(self):
        record = SiteRecord(
            id="1", name="Shop", url="https://shop.example.com",
            username="admin", application_password="pw",
            consumer_key="ck", consumer_secret="cs",
        )
        public = record.public_dict()
        assert "applicationPassword" not in public
        assert "consumerSecret" not in public
        assert public["consumerKey"] == "ck"
        assert record.public_dict(include_credentials=True)["applicationPassword"] == "pw"

    def test_credential_flags(self):
        record = SiteRecord(id="1", name="Blog", url="https://blog.example.com", username="admin")
        assert not record.has_wordpress_credentials
        assert not record.has_woocommerce_credentials

    def test_round_trip(self):
        data = {"id": "1", "name": "Blog", "url": "https://blog.example.com", "consumerKey": "ck"}
        assert SiteRecord.from_dict(data).to_dict() == data
