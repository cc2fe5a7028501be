from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from contest_scorer.schemas import ValidContact

IndexKey = tuple[str, str, str, str]


@dataclass(slots=True)
class ContactIndex:
    """Arena of contacts with a lookup by ``(owner, contacted, band, mode)``.

    Finding the other side of a contact means looking up the contacted
    party's log for entries that name the owner on the same band and mode.
    """

    contacts: list[ValidContact] = field(default_factory=list)
    _positions: dict[IndexKey, list[int]] = field(default_factory=dict)

    @classmethod
    def build(cls, contacts: Iterable[ValidContact]) -> ContactIndex:
        index = cls()
        for contact in contacts:
            index.add(contact)
        return index

    def add(self, contact: ValidContact) -> None:
        self._positions.setdefault(_key_for(contact), []).append(len(self.contacts))
        self.contacts.append(contact)

    def candidates(
        self,
        *,
        owner: str,
        contacted: str,
        band: str,
        mode: str,
    ) -> list[ValidContact]:
        positions = self._positions.get((owner, contacted, band, mode), [])
        return [self.contacts[position] for position in positions]

    def counterparts(self, contact: ValidContact) -> list[ValidContact]:
        return self.candidates(
            owner=contact.contacted_callsign,
            contacted=contact.callsign,
            band=contact.band,
            mode=contact.mode,
        )

    def __len__(self) -> int:
        return len(self.contacts)


def _key_for(contact: ValidContact) -> IndexKey:
    return contact.callsign, contact.contacted_callsign, contact.band, contact.mode
