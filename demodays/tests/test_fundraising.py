"""Tests for the fundraising profile manager and listing transitions."""

# ruff: noqa: PLR2004

from collections.abc import Callable

import pytest
from django.db import transaction
from model_bakery import baker

from demodays.exceptions import AccessDeniedError, NotFoundError, ValidationError
from demodays.fundraising import (
    PROFILE_ADDED_EVENT,
    PROFILE_REMOVED_EVENT,
    attach_upload,
    detach_upload,
    get_or_create_profile,
    get_profiles_for_viewer,
    is_listing_eligible,
    recompute_fundraising_profile_status,
    update_description,
    update_team_details,
)
from demodays.models import FundraisingProfile, Participant, Upload
from demodays.participants import soft_delete_participant, update_participant
from demodays.tests.helpers import event_names
from demodays.types import UploadSlot
from events.models import DemoDay
from teams.models import Team
from users.models import CustomUser


@pytest.mark.django_db
class TestDerivedStatus:
    """Verify the publication status is derived from the materials."""

    def test_new_profile_is_draft(self, demo_day: DemoDay, team: Team) -> None:
        """A fresh profile starts as a draft."""
        profile = get_or_create_profile(team, demo_day)
        assert profile.status == FundraisingProfile.Status.DRAFT
        assert get_or_create_profile(team, demo_day) == profile

    def test_both_uploads_publish(
        self,
        demo_day: DemoDay,
        team: Team,
        one_pager: Upload,
        video: Upload,
    ) -> None:
        """Name, one-pager and video together publish the profile."""
        attach_upload(team, demo_day, UploadSlot.ONE_PAGER, one_pager.uid)
        assert FundraisingProfile.objects.get(team=team).status == FundraisingProfile.Status.DRAFT

        profile = attach_upload(team, demo_day, UploadSlot.VIDEO, video.uid)
        assert profile.status == FundraisingProfile.Status.PUBLISHED

    def test_detach_reverts_to_draft(
        self,
        demo_day: DemoDay,
        team: Team,
        one_pager: Upload,
        video: Upload,
    ) -> None:
        """Removing a required upload turns the profile back into a draft."""
        attach_upload(team, demo_day, "one_pager", one_pager.uid)
        attach_upload(team, demo_day, "video", video.uid)
        profile = detach_upload(team, demo_day, "video")
        assert profile.status == FundraisingProfile.Status.DRAFT
        assert profile.video_upload is None

    def test_blank_team_name_is_draft(
        self,
        demo_day: DemoDay,
        one_pager: Upload,
        video: Upload,
    ) -> None:
        """Without a team name the profile stays a draft."""
        nameless = baker.make(Team, name="   ")
        attach_upload(nameless, demo_day, UploadSlot.ONE_PAGER, one_pager.uid)
        profile = attach_upload(nameless, demo_day, UploadSlot.VIDEO, video.uid)
        assert profile.status == FundraisingProfile.Status.DRAFT

    def test_wrong_upload_kind(self, demo_day: DemoDay, team: Team, video: Upload) -> None:
        """A video cannot be used as the one-pager."""
        with pytest.raises(ValidationError):
            attach_upload(team, demo_day, UploadSlot.ONE_PAGER, video.uid)
        assert not FundraisingProfile.objects.exists()

    def test_unknown_upload(self, demo_day: DemoDay, team: Team) -> None:
        """Unknown and malformed upload ids are not found."""
        with pytest.raises(NotFoundError):
            attach_upload(team, demo_day, UploadSlot.VIDEO, "nope")

    def test_detach_without_profile(self, demo_day: DemoDay, team: Team) -> None:
        """Detaching from a team without a profile is not found."""
        with pytest.raises(NotFoundError):
            detach_upload(team, demo_day, UploadSlot.VIDEO)

    def test_recompute_is_idempotent(
        self,
        demo_day: DemoDay,
        published_team: Team,
        analytics_outbox: list,
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """Recomputing twice with no change writes and emits nothing new."""
        profile = FundraisingProfile.objects.get(team=published_team)
        updated_at = profile.updated_at
        with django_capture_on_commit_callbacks(execute=True):
            recompute_fundraising_profile_status(published_team, demo_day)
            recompute_fundraising_profile_status(published_team, demo_day)
        profile.refresh_from_db()
        assert profile.updated_at == updated_at
        assert analytics_outbox == []

    def test_recompute_without_profile(self, demo_day: DemoDay, team: Team) -> None:
        """Recomputing a missing profile is not found."""
        with pytest.raises(NotFoundError):
            recompute_fundraising_profile_status(team, demo_day)

    def test_update_description(self, demo_day: DemoDay, team: Team) -> None:
        """The description can be edited without changing the status."""
        profile = update_description(team, demo_day, "We make rockets cheaper.")
        assert profile.description == "We make rockets cheaper."
        assert profile.status == FundraisingProfile.Status.DRAFT


@pytest.mark.django_db
class TestListingTransitions:
    """Verify listing events are emitted exactly once per eligibility edge."""

    def test_publishing_with_enabled_founder_lists_team(
        self,
        demo_day: DemoDay,
        team: Team,
        one_pager: Upload,
        video: Upload,
        make_founder: Callable[..., Participant],
        analytics_outbox: list,
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """The write that completes the materials emits the added event."""
        make_founder(team, "founder@rocket.example.com")
        with django_capture_on_commit_callbacks(execute=True):
            attach_upload(team, demo_day, UploadSlot.ONE_PAGER, one_pager.uid)
            attach_upload(team, demo_day, UploadSlot.VIDEO, video.uid)

        assert event_names(analytics_outbox) == [PROFILE_ADDED_EVENT]
        event = analytics_outbox[0]
        assert event.distinct_id == str(team.uid)
        assert event.properties["foundersCount"] == 1
        assert event.properties["hasOnePager"]
        assert event.properties["hasVideo"]

    def test_publishing_without_founder_is_silent(
        self,
        demo_day: DemoDay,
        team: Team,
        one_pager: Upload,
        video: Upload,
        analytics_outbox: list,
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """A published profile without an enabled founder is not listed."""
        with django_capture_on_commit_callbacks(execute=True):
            attach_upload(team, demo_day, UploadSlot.ONE_PAGER, one_pager.uid)
            attach_upload(team, demo_day, UploadSlot.VIDEO, video.uid)
        assert analytics_outbox == []
        assert not is_listing_eligible(team, demo_day)

    def test_founder_status_cycle(
        self,
        demo_day: DemoDay,
        team: Team,
        one_pager: Upload,
        video: Upload,
        make_founder: Callable[..., Participant],
        analytics_outbox: list,
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """ENABLED -> DISABLED -> ENABLED yields added, removed, added."""
        founder = make_founder(team, "cycle@rocket.example.com", status=Participant.Status.INVITED)
        attach_upload(team, demo_day, UploadSlot.ONE_PAGER, one_pager.uid)
        attach_upload(team, demo_day, UploadSlot.VIDEO, video.uid)

        with django_capture_on_commit_callbacks(execute=True):
            for status in (
                Participant.Status.ENABLED,
                Participant.Status.DISABLED,
                Participant.Status.ENABLED,
            ):
                update_participant(demo_day, founder.uid, status=status)

        listing_events = [
            name
            for name in event_names(analytics_outbox)
            if name in {PROFILE_ADDED_EVENT, PROFILE_REMOVED_EVENT}
        ]
        assert listing_events == [PROFILE_ADDED_EVENT, PROFILE_REMOVED_EVENT, PROFILE_ADDED_EVENT]

    def test_publication_cycle(
        self,
        demo_day: DemoDay,
        team: Team,
        one_pager: Upload,
        video: Upload,
        make_founder: Callable[..., Participant],
        analytics_outbox: list,
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """DRAFT -> PUBLISHED -> DRAFT -> PUBLISHED yields added, removed, added."""
        make_founder(team, "materials@rocket.example.com")

        with django_capture_on_commit_callbacks(execute=True):
            attach_upload(team, demo_day, UploadSlot.ONE_PAGER, one_pager.uid)
            attach_upload(team, demo_day, UploadSlot.VIDEO, video.uid)
            draft = detach_upload(team, demo_day, UploadSlot.VIDEO)
            republished = attach_upload(team, demo_day, UploadSlot.VIDEO, video.uid)

        assert draft.status == FundraisingProfile.Status.DRAFT
        assert republished.status == FundraisingProfile.Status.PUBLISHED
        assert event_names(analytics_outbox) == [
            PROFILE_ADDED_EVENT,
            PROFILE_REMOVED_EVENT,
            PROFILE_ADDED_EVENT,
        ]

    def test_second_founder_does_not_relist(
        self,
        demo_day: DemoDay,
        published_team: Team,
        make_founder: Callable[..., Participant],
        analytics_outbox: list,
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """Enabling another founder of an already listed team emits nothing."""
        second = make_founder(
            published_team,
            "second@listed.example.com",
            status=Participant.Status.INVITED,
        )
        with django_capture_on_commit_callbacks(execute=True):
            update_participant(demo_day, second.uid, status=Participant.Status.ENABLED)
        assert PROFILE_ADDED_EVENT not in event_names(analytics_outbox)

    def test_soft_deleting_last_founder_unlists(
        self,
        demo_day: DemoDay,
        published_team: Team,
        analytics_outbox: list,
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """Removing the only enabled founder emits the removed event."""
        founder = Participant.objects.get(team=published_team)
        with django_capture_on_commit_callbacks(execute=True):
            soft_delete_participant(demo_day, founder.uid)
        assert event_names(analytics_outbox) == [PROFILE_REMOVED_EVENT]

    def test_rolled_back_write_emits_nothing(
        self,
        demo_day: DemoDay,
        team: Team,
        one_pager: Upload,
        video: Upload,
        make_founder: Callable[..., Participant],
        analytics_outbox: list,
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """An event registered inside a rolled-back transaction is never delivered."""
        make_founder(team, "rollback@rocket.example.com")
        attach_upload(team, demo_day, UploadSlot.ONE_PAGER, one_pager.uid)

        with django_capture_on_commit_callbacks(execute=True):
            with pytest.raises(RuntimeError), transaction.atomic():
                attach_upload(team, demo_day, UploadSlot.VIDEO, video.uid)
                raise RuntimeError

        assert analytics_outbox == []
        assert FundraisingProfile.objects.get(team=team).status == FundraisingProfile.Status.DRAFT


@pytest.mark.django_db
class TestUpdateTeamDetails:
    """Verify team detail edits."""

    def test_rename_to_blank_is_rejected(self, demo_day: DemoDay, team: Team) -> None:
        """A blank name is rejected."""
        with pytest.raises(ValidationError):
            update_team_details(team, demo_day, name="  ")

    def test_unknown_field_is_rejected(self, demo_day: DemoDay, team: Team) -> None:
        """Only profile-facing team fields are editable."""
        with pytest.raises(ValidationError):
            update_team_details(team, demo_day, is_fund=True)

    def test_details_are_saved(self, demo_day: DemoDay, team: Team) -> None:
        """Edited fields land on the team and a profile exists afterwards."""
        profile = update_team_details(team, demo_day, industry="Climate", stage="Series A")
        team.refresh_from_db()
        assert team.industry == "Climate"
        assert team.stage == "Series A"
        assert profile.team == team

    def test_naming_a_team_can_list_it(
        self,
        demo_day: DemoDay,
        one_pager: Upload,
        video: Upload,
        make_founder: Callable[..., Participant],
        analytics_outbox: list,
        django_capture_on_commit_callbacks: Callable,
    ) -> None:
        """Giving a nameless team a name publishes it and emits the added event."""
        nameless = baker.make(Team, name=" ")
        make_founder(nameless, "nameless@example.com")
        attach_upload(nameless, demo_day, UploadSlot.ONE_PAGER, one_pager.uid)
        attach_upload(nameless, demo_day, UploadSlot.VIDEO, video.uid)

        with django_capture_on_commit_callbacks(execute=True):
            profile = update_team_details(nameless, demo_day, name="Finally Named")

        assert profile.status == FundraisingProfile.Status.PUBLISHED
        assert event_names(analytics_outbox) == [PROFILE_ADDED_EVENT]


@pytest.mark.django_db
class TestProfilesForViewer:
    """Verify the personalized profile listing."""

    @pytest.fixture()
    def listed_teams(
        self,
        demo_day: DemoDay,
        make_founder: Callable[..., Participant],
    ) -> list[Team]:
        """Create six published teams, each with an enabled founder."""
        teams = []
        for index in range(6):
            listed = baker.make(Team, name=f"Startup {index}", industry="AI", stage="Seed")
            make_founder(listed, f"founder{index}@example.com")
            FundraisingProfile.objects.create(
                team=listed,
                demo_day=demo_day,
                one_pager_upload=baker.make(Upload, kind=Upload.Kind.IMAGE),
                video_upload=baker.make(Upload, kind=Upload.Kind.VIDEO),
                status=FundraisingProfile.Status.PUBLISHED,
            )
            teams.append(listed)
        return teams

    def test_order_is_stable_per_viewer(
        self,
        demo_day: DemoDay,
        viewer: CustomUser,
        listed_teams: list[Team],
    ) -> None:
        """The same viewer always gets the same order."""
        first = get_profiles_for_viewer(viewer, demo_day)
        second = get_profiles_for_viewer(viewer, demo_day)
        assert [p.pk for p in first] == [p.pk for p in second]
        assert len(first) == 6

    def test_order_is_a_permutation_across_viewers(
        self,
        demo_day: DemoDay,
        make_viewer: Callable[..., CustomUser],
        listed_teams: list[Team],
    ) -> None:
        """Different viewers see the same profiles, typically in different orders."""
        orders = {
            tuple(p.team.name for p in get_profiles_for_viewer(viewer, demo_day))
            for viewer in (make_viewer(f"viewer{index}@example.com") for index in range(5))
        }
        assert all(sorted(order) == sorted(t.name for t in listed_teams) for order in orders)
        assert len(orders) > 1

    def test_founders_can_browse(
        self,
        demo_day: DemoDay,
        published_team: Team,
    ) -> None:
        """Enabled founders pass the access check like investors do."""
        founder = Participant.objects.get(team=published_team).identity
        assert [p.team for p in get_profiles_for_viewer(founder, demo_day)] == [published_team]

    def test_non_participant_is_denied(
        self,
        demo_day: DemoDay,
        identity: CustomUser,
        published_team: Team,
    ) -> None:
        """Identities outside the demo day never see the listing."""
        with pytest.raises(AccessDeniedError):
            get_profiles_for_viewer(identity, demo_day)

    @pytest.mark.parametrize(
        "status",
        [Participant.Status.PENDING, Participant.Status.INVITED, Participant.Status.DISABLED],
    )
    def test_participant_not_enabled_is_denied(
        self,
        demo_day: DemoDay,
        make_viewer: Callable[..., CustomUser],
        published_team: Team,
        status: str,
    ) -> None:
        """Pending applicants, invited and disabled participants are refused."""
        blocked = make_viewer("blocked@fund.example.com", status=status)
        with pytest.raises(AccessDeniedError):
            get_profiles_for_viewer(blocked, demo_day)

    def test_soft_deleted_participant_is_denied(
        self,
        demo_day: DemoDay,
        viewer: CustomUser,
        published_team: Team,
    ) -> None:
        """A removed participant loses access to the listing."""
        Participant.objects.filter(identity=viewer).update(is_deleted=True)
        with pytest.raises(AccessDeniedError):
            get_profiles_for_viewer(viewer, demo_day)

    def test_drafts_hidden_from_regular_viewers(
        self,
        demo_day: DemoDay,
        viewer: CustomUser,
        team: Team,
        make_founder: Callable[..., Participant],
        listed_teams: list[Team],
    ) -> None:
        """Draft profiles only show up for admins who ask for them."""
        make_founder(team, "draft@rocket.example.com")
        get_or_create_profile(team, demo_day)

        assert team not in [p.team for p in get_profiles_for_viewer(viewer, demo_day)]
        assert team not in [
            p.team for p in get_profiles_for_viewer(viewer, demo_day, show_draft=True)
        ]

    def test_drafts_visible_to_admin(
        self,
        demo_day: DemoDay,
        staff: CustomUser,
        team: Team,
        make_founder: Callable[..., Participant],
    ) -> None:
        """Staff see drafts when they ask for them, without taking part in the demo day."""
        make_founder(team, "draft@rocket.example.com")
        get_or_create_profile(team, demo_day)
        assert [p.team for p in get_profiles_for_viewer(staff, demo_day, show_draft=True)] == [
            team,
        ]

    def test_drafts_visible_to_demo_day_admin(
        self,
        demo_day: DemoDay,
        make_viewer: Callable[..., CustomUser],
        team: Team,
        make_founder: Callable[..., Participant],
    ) -> None:
        """Participants flagged as demo day admins also see drafts."""
        make_founder(team, "draft@rocket.example.com")
        get_or_create_profile(team, demo_day)
        organizer = make_viewer("organizer@example.com", is_demo_day_admin=True)
        assert [p.team for p in get_profiles_for_viewer(organizer, demo_day, show_draft=True)] == [
            team,
        ]

    def test_team_without_enabled_founder_is_hidden(
        self,
        demo_day: DemoDay,
        staff: CustomUser,
        team: Team,
        make_founder: Callable[..., Participant],
    ) -> None:
        """Teams whose founders are not enabled never show up."""
        make_founder(team, "disabled@rocket.example.com", status=Participant.Status.DISABLED)
        get_or_create_profile(team, demo_day)
        assert get_profiles_for_viewer(staff, demo_day, show_draft=True) == []

    def test_filters(
        self,
        demo_day: DemoDay,
        viewer: CustomUser,
        listed_teams: list[Team],
        published_team: Team,
    ) -> None:
        """Search, industry and stage narrow the listing."""
        assert [p.team for p in get_profiles_for_viewer(viewer, demo_day, search="listed")] == [
            published_team,
        ]
        assert [p.team for p in get_profiles_for_viewer(viewer, demo_day, industry="health")] == [
            published_team,
        ]
        assert len(get_profiles_for_viewer(viewer, demo_day, stage="seed")) == 6

    def test_list_filters(
        self,
        demo_day: DemoDay,
        viewer: CustomUser,
        listed_teams: list[Team],
        published_team: Team,
    ) -> None:
        """Industry and stage also accept several values."""
        assert len(get_profiles_for_viewer(viewer, demo_day, industry=["ai", "Health"])) == 7
        stages = ["series a", "Pre-Seed"]
        assert [p.team for p in get_profiles_for_viewer(viewer, demo_day, stage=stages)] == [
            published_team,
        ]
        assert get_profiles_for_viewer(viewer, demo_day, stage=["Series B"]) == []
