"""Tests for the team store models."""

import pytest
from django.db import IntegrityError
from model_bakery import baker

from teams.models import InvestorProfile, Team, TeamMemberRole
from users.models import CustomUser


@pytest.fixture()
def member() -> CustomUser:
    """Create an identity."""
    return CustomUser.objects.create_user(email="member@example.com", name="Member")


@pytest.mark.django_db
class TestTeam:
    """Tests for Team lookups and helpers."""

    def test_find_by_name_is_case_insensitive(self) -> None:
        """Names match regardless of case and surrounding whitespace."""
        team = baker.make(Team, name="Rocket Labs")
        assert Team.objects.find_by_name("  rocket LABS ") == team

    def test_find_by_name_prefers_oldest(self) -> None:
        """The oldest of several same-named teams wins."""
        first = baker.make(Team, name="Twin")
        baker.make(Team, name="twin")
        assert Team.objects.find_by_name("TWIN") == first

    def test_find_by_name_blank(self) -> None:
        """Blank names never match."""
        baker.make(Team, name="")
        assert Team.objects.find_by_name("   ") is None

    def test_current_leads(self, member: CustomUser) -> None:
        """Only lead memberships are returned."""
        team = baker.make(Team)
        lead = TeamMemberRole.objects.create(identity=member, team=team, team_lead=True)
        baker.make(TeamMemberRole, team=team, team_lead=False)
        assert list(team.current_leads()) == [lead]


@pytest.mark.django_db
class TestTeamMemberRole:
    """Tests for membership lookups and removal."""

    def test_unique_per_identity_and_team(self, member: CustomUser) -> None:
        """An identity has at most one role per team."""
        team = baker.make(Team)
        TeamMemberRole.objects.create(identity=member, team=team)
        with pytest.raises(IntegrityError):
            TeamMemberRole.objects.create(identity=member, team=team)

    def test_primary_for_prefers_main_team(self, member: CustomUser) -> None:
        """The main-team role wins over older roles."""
        TeamMemberRole.objects.create(identity=member, team=baker.make(Team))
        main = TeamMemberRole.objects.create(identity=member, team=baker.make(Team), main_team=True)
        assert TeamMemberRole.objects.primary_for(member) == main

    def test_primary_for_falls_back_to_oldest(self, member: CustomUser) -> None:
        """Without a main team the oldest role is primary."""
        oldest = TeamMemberRole.objects.create(identity=member, team=baker.make(Team))
        TeamMemberRole.objects.create(identity=member, team=baker.make(Team))
        assert TeamMemberRole.objects.primary_for(member) == oldest

    def test_primary_for_without_roles(self, member: CustomUser) -> None:
        """Identities without teams have no primary role."""
        assert TeamMemberRole.objects.primary_for(member) is None

    def test_remove_members(self, member: CustomUser) -> None:
        """Only the given identities lose their role in the given team."""
        team, other_team = baker.make(Team, _quantity=2)
        TeamMemberRole.objects.create(identity=member, team=team)
        TeamMemberRole.objects.create(identity=member, team=other_team)
        stays = baker.make(TeamMemberRole, team=team)

        removed = TeamMemberRole.objects.remove_members(team, [member])

        assert removed == 1
        assert list(team.member_roles.all()) == [stays]
        assert TeamMemberRole.objects.for_pair(member, other_team) is not None

    def test_str_marks_lead(self, member: CustomUser) -> None:
        """Leads are marked in the string representation."""
        role = TeamMemberRole(identity=member, team=Team(name="Rocket Labs"), team_lead=True)
        assert str(role) == "member@example.com @ Rocket Labs (lead)"


@pytest.mark.django_db
class TestInvestorProfile:
    """Tests for the investor profile owner constraint."""

    def test_needs_an_owner(self) -> None:
        """A profile without identity or team is refused."""
        with pytest.raises(IntegrityError):
            InvestorProfile.objects.create()

    def test_single_owner(self, member: CustomUser) -> None:
        """A profile cannot belong to an identity and a team at once."""
        with pytest.raises(IntegrityError):
            InvestorProfile.objects.create(identity=member, team=baker.make(Team))

    @pytest.mark.parametrize(
        ("investment_type", "expected"),
        [
            (InvestorProfile.InvestmentType.ANGEL, False),
            (InvestorProfile.InvestmentType.FUND, True),
            (InvestorProfile.InvestmentType.ANGEL_AND_FUND, True),
        ],
    )
    def test_is_fund_level(self, investment_type: str, *, expected: bool) -> None:
        """Fund and mixed investors are fund-level."""
        assert InvestorProfile(investment_type=investment_type).is_fund_level is expected
