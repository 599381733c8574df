"""ORM mapping checks."""

from sqlalchemy import inspect

from partners_hub.db.base import Base
from partners_hub.domain import Client, Company


class TestMappings:
    def test_no_relationship_uses_noload(self):
        for mapper in Base.registry.mappers:
            for rel in mapper.relationships:
                assert rel.lazy != "noload", f"{mapper.class_.__name__}.{rel.key}"

    def test_client_company_is_one_way(self):
        assert "company" in inspect(Client).relationships
        assert "clients" not in inspect(Company).relationships
