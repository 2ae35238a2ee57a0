"""
Shared types for the demo day subsystem.

A participant's type is modelled as a tagged variant: only the founder seat carries a team, so
an investor can never hold a team assignment.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from teams.models import Team


class ParticipantType(StrEnum):
    """Kind of seat a participant holds at a demo day."""

    INVESTOR = "INVESTOR"
    FOUNDER = "FOUNDER"


class UploadSlot(StrEnum):
    """Material slots of a fundraising profile."""

    ONE_PAGER = "one_pager"
    VIDEO = "video"


class ReviewAction(StrEnum):
    """Admin decision on a team-lead request."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"


@dataclass(frozen=True)
class InvestorSeat:
    """Investor participation. Investors never belong to a pitching team."""

    @property
    def type(self) -> ParticipantType:
        """Return the participant type tag."""
        return ParticipantType.INVESTOR

    @property
    def team(self) -> None:
        """Investors carry no team."""
        return


@dataclass(frozen=True)
class FounderSeat:
    """Founder participation, optionally pitching for *team*."""

    team: Team | None = None

    @property
    def type(self) -> ParticipantType:
        """Return the participant type tag."""
        return ParticipantType.FOUNDER


type Seat = InvestorSeat | FounderSeat


def seat_for(participant_type: str, team: Team | None = None) -> Seat:
    """
    Build the seat variant for *participant_type*.

    Raises:
        ValueError: If *team* is given for a non-founder type

    """
    if participant_type == ParticipantType.FOUNDER:
        return FounderSeat(team=team)
    if team is not None:
        msg = "Only founders can be assigned to a team"
        raise ValueError(msg)
    return InvestorSeat()
