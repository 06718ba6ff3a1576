"""Person operations."""

from typing import Optional
from uuid import UUID

from finledger.audit import AuditLogger
from finledger.models.audit import AuditEventBuilder, AuditEventType
from finledger.models.person import Person
from finledger.services.storage.repositories import PersonRepository


class PersonUseCase:
    def __init__(
        self,
        person_repo: PersonRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._people = person_repo
        self._audit = audit_logger or AuditLogger()

    def create_person(self, name: str, email: str = "", phone: str = "") -> Person:
        person = Person.create(name, email, phone)
        self._people.create(person)
        self._audit.log(AuditEventBuilder.person_event(
            AuditEventType.PERSON_CREATED, person.id, person.name
        ))
        return person

    def get_person(self, person_id: UUID) -> Person:
        return self._people.find_by_id(person_id)

    def list_people(self) -> list[Person]:
        return self._people.find_all()

    def update_person(self, person_id: UUID, name: str, email: str, phone: str) -> Person:
        person = self._people.find_by_id(person_id)
        person.update(name, email, phone)
        self._people.update(person)
        self._audit.log(AuditEventBuilder.person_event(
            AuditEventType.PERSON_UPDATED, person.id, person.name
        ))
        return person

    def delete_person(self, person_id: UUID) -> None:
        """Delete a person. Shares that reference them stay on their transactions."""
        self._people.delete(person_id)
        self._audit.log(AuditEventBuilder.entity_deleted(
            AuditEventType.PERSON_DELETED, "person", person_id
        ))

    def find_by_email(self, email: str) -> Optional[Person]:
        return self._people.find_by_email(email)
