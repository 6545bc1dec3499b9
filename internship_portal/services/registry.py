"""
Domain Registry

The in-memory catalogue of every portal record, pre-populated at start-up
from JSONL seed files. Lookups either return the record or raise
ReferenceNotFound (``get_*``), or return None for callers that want to branch
on absence themselves (``find_*``). Every insert checks that the ids it
references exist.

Example Usage:
    from internship_portal.services.registry import DomainRegistry

    registry = DomainRegistry.from_seed()
    company = registry.get_company("1")
    maybe_user = registry.find_user("missing")   # None
"""

from pathlib import Path
from typing import Iterable, Optional, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from internship_portal.models.application import Application
from internship_portal.models.company import Company
from internship_portal.models.engagement import ChatRoom, Meeting, Message
from internship_portal.models.feedback import FinalReport, Invitation, Review
from internship_portal.models.phase import Phase
from internship_portal.models.user import User, utc_now
from internship_portal.utils.errors import ConfigurationError, ReferenceNotFound
from internship_portal.utils.logger import get_logger
from internship_portal.utils.snapshot_store import SnapshotStore
from internship_portal.utils.validator import ConfigValidator

R = TypeVar("R", bound=BaseModel)

BUNDLED_SEED_DIR = Path(__file__).resolve().parent.parent / "data"

# Load order matters: later collections reference earlier ones.
COLLECTIONS: list[tuple[str, type[BaseModel]]] = [
    ("users", User),
    ("companies", Company),
    ("phases", Phase),
    ("applications", Application),
    ("meetings", Meeting),
    ("chat_rooms", ChatRoom),
    ("messages", Message),
    ("reviews", Review),
    ("final_reports", FinalReport),
    ("invitations", Invitation),
]


class DomainRegistry:
    """In-memory store of users, companies, phases and their dependent records."""

    def __init__(self, correlation_id: Optional[str] = None):
        self.users: list[User] = []
        self.companies: list[Company] = []
        self.phases: list[Phase] = []
        self.applications: list[Application] = []
        self.meetings: list[Meeting] = []
        self.chat_rooms: list[ChatRoom] = []
        self.messages: list[Message] = []
        self.reviews: list[Review] = []
        self.final_reports: list[FinalReport] = []
        self.invitations: list[Invitation] = []
        self.logger = get_logger(
            correlation_id=correlation_id, component="domain_registry"
        )

    # ------------------------------------------------------------------ lookups

    @staticmethod
    def _find(records: Iterable[R], record_id: str) -> Optional[R]:
        for record in records:
            if record.id == record_id:  # type: ignore[attr-defined]
                return record
        return None

    def _get(self, records: Iterable[R], entity: str, record_id: str) -> R:
        record = self._find(records, record_id)
        if record is None:
            self.logger.debug("Lookup failed", entity=entity, entity_id=record_id)
            raise ReferenceNotFound(entity, record_id)
        return record

    def find_user(self, user_id: str) -> Optional[User]:
        return self._find(self.users, user_id)

    def get_user(self, user_id: str) -> User:
        return self._get(self.users, "User", user_id)

    def find_company(self, company_id: str) -> Optional[Company]:
        return self._find(self.companies, company_id)

    def get_company(self, company_id: str) -> Company:
        return self._get(self.companies, "Company", company_id)

    def find_phase(self, phase_id: str) -> Optional[Phase]:
        return self._find(self.phases, phase_id)

    def get_phase(self, phase_id: str) -> Phase:
        return self._get(self.phases, "Phase", phase_id)

    def find_application(self, application_id: str) -> Optional[Application]:
        return self._find(self.applications, application_id)

    def get_application(self, application_id: str) -> Application:
        return self._get(self.applications, "Application", application_id)

    def get_meeting(self, meeting_id: str) -> Meeting:
        return self._get(self.meetings, "Meeting", meeting_id)

    def get_chat_room(self, room_id: str) -> ChatRoom:
        return self._get(self.chat_rooms, "ChatRoom", room_id)

    def get_final_report(self, report_id: str) -> FinalReport:
        return self._get(self.final_reports, "FinalReport", report_id)

    def company_of(self, user: User) -> Optional[Company]:
        """Company a company-role user works for, if any."""
        if user.company_id:
            company = self.find_company(user.company_id)
            if company is not None:
                return company
        for company in self.companies:
            if company.has_employee(user.id):
                return company
        return None

    def students(self) -> list[User]:
        return [user for user in self.users if user.is_student]

    # ------------------------------------------------------------------ inserts

    def _require_users(self, user_ids: Sequence[str]) -> None:
        for user_id in user_ids:
            self.get_user(user_id)

    def add_user(self, user: User) -> User:
        if self.find_user(user.id) is not None:
            raise ValueError(f"Duplicate user id: {user.id}")
        self.users.append(user)
        return user

    def add_company(self, company: Company) -> Company:
        if self.find_company(company.id) is not None:
            raise ValueError(f"Duplicate company id: {company.id}")
        for employee in company.users:
            if self.find_user(employee.id) is None:
                self.users.append(employee)
        self.companies.append(company)
        return company

    def add_phase(self, phase: Phase) -> Phase:
        if self.find_phase(phase.id) is not None:
            raise ValueError(f"Duplicate phase id: {phase.id}")
        self.phases.append(phase)
        return phase

    def add_application(self, application: Application) -> Application:
        self.get_user(application.student_id)
        self.get_company(application.company_id)
        self.get_phase(application.phase_id)
        self.applications.append(application)
        return application

    def add_meeting(self, meeting: Meeting) -> Meeting:
        self.get_company(meeting.company_id)
        self._require_users(meeting.student_ids)
        self.meetings.append(meeting)
        return meeting

    def add_chat_room(self, room: ChatRoom) -> ChatRoom:
        self.get_company(room.company_id)
        self._require_users(room.student_ids)
        self.chat_rooms.append(room)
        return room

    def add_message(self, message: Message) -> Message:
        self.get_chat_room(message.chat_room_id)
        self.get_user(message.sender_id)
        self.messages.append(message)
        return message

    def add_review(self, review: Review) -> Review:
        self.get_user(review.student_id)
        self.get_company(review.company_id)
        self.reviews.append(review)
        return review

    def add_final_report(self, report: FinalReport) -> FinalReport:
        self.get_user(report.student_id)
        self.get_company(report.company_id)
        self.final_reports.append(report)
        return report

    def add_invitation(self, invitation: Invitation) -> Invitation:
        self.get_user(invitation.invited_by)
        self.invitations.append(invitation)
        return invitation

    # ------------------------------------------------------------------ updates

    def replace(self, record: R) -> R:
        """Swap a stored record for an updated copy with the same id.

        Stamps ``updated_at`` and keeps the record's position in its collection.
        """
        collection = self._collection_for(type(record))
        for index, existing in enumerate(collection):
            if existing.id == record.id:
                if "updated_at" in type(record).model_fields:
                    record.updated_at = utc_now()
                collection[index] = record
                return record
        raise ReferenceNotFound(type(record).__name__, record.id)  # type: ignore[attr-defined]

    def _collection_for(self, model: type[BaseModel]) -> list:
        for name, collection_model in COLLECTIONS:
            if collection_model is model:
                return getattr(self, name)
        raise TypeError(f"No registry collection holds {model.__name__}")

    # ------------------------------------------------------------------ snapshots

    @classmethod
    def from_seed(
        cls,
        seed_dir: Optional[str | Path] = None,
        correlation_id: Optional[str] = None,
        validator: Optional[ConfigValidator] = None,
    ) -> "DomainRegistry":
        """
        Build a registry from JSONL seed files.

        Args:
            seed_dir: Directory of <collection>.jsonl files (defaults to bundled data)
            correlation_id: Correlation ID for logging
            validator: Schema validator for raw records (defaults to bundled schemas)

        Returns:
            Populated DomainRegistry

        Raises:
            ConfigurationError: If a record fails schema or model validation, or
                references an id that does not exist
        """
        registry = cls(correlation_id=correlation_id)
        store = SnapshotStore(seed_dir or BUNDLED_SEED_DIR, create=False)
        validator = validator or ConfigValidator()

        for name, model in COLLECTIONS:
            raw_records = store.load_collection(name)
            validator.validate_records(name, raw_records)
            adder = getattr(registry, f"add_{_singular(name)}")
            for raw in raw_records:
                try:
                    adder(model.model_validate(raw))
                except ValidationError as e:
                    raise ConfigurationError(
                        f"Invalid seed record in '{name}': {e}"
                    ) from e
                except (ReferenceNotFound, ValueError) as e:
                    raise ConfigurationError(
                        f"Seed record in '{name}' is inconsistent: {e}"
                    ) from e
            registry.logger.debug("Seed collection loaded", collection=name, count=len(raw_records))

        active = [phase.id for phase in registry.phases if phase.is_active]
        if len(active) > 1:
            registry.logger.error("Seed has several active phases", phase_ids=active)
            raise ConfigurationError(
                f"At most one phase may be active, the seed activates {', '.join(active)}"
            )

        registry.logger.info(
            "Registry seeded",
            seed_dir=str(store.snapshot_dir),
            users=len(registry.users),
            companies=len(registry.companies),
            phases=len(registry.phases),
            applications=len(registry.applications),
        )
        return registry

    def export(self, snapshot_dir: str | Path) -> list[Path]:
        """Write every collection to ``snapshot_dir`` as JSONL. Returns written files."""
        store = SnapshotStore(snapshot_dir)
        written = [
            store.save_collection(name, getattr(self, name)) for name, _ in COLLECTIONS
        ]
        self.logger.info("Registry exported", snapshot_dir=str(snapshot_dir), files=len(written))
        return written


def _singular(collection: str) -> str:
    if collection == "companies":
        return "company"
    return collection[:-1]
