# tests/test_room_capabilities.py

from types import SimpleNamespace
from uuid import uuid4

import pytest

from src.common.exceptions import AuthorizationError
from src.models.models import UserRole
from src.modules.room.room_service import is_room_disabled, resolve_capabilities, resolve_role
from src.modules.room.schemas import CapabilityReason, RoomRole
from src.modules.settings.schemas import RoomFlags

CAPABILITIES = ("chat", "audio", "video", "vitals_panel", "attachments", "prescriptions")


def all_on(**overrides) -> RoomFlags:
    values = dict(
        live_video_enabled=True,
        live_audio_enabled=True,
        live_chat_enabled=True,
        live_attachments_enabled=True,
        prescriptions_enabled=True,
        vitals_panel_enabled=True,
        admin_join_enabled=True,
    )
    values.update(overrides)
    return RoomFlags(**values)


def test_room_disabled_when_audio_and_video_off():
    flags = all_on(live_video_enabled=False, live_audio_enabled=False)
    caps = resolve_capabilities(flags, RoomRole.DOCTOR)

    assert caps.room_disabled is True
    for name in CAPABILITIES:
        capability = getattr(caps, name)
        assert capability.enabled is False
        assert capability.reason == CapabilityReason.ROOM_DISABLED
        assert capability.placeholder


def test_audio_only_room_stays_open():
    flags = all_on(live_video_enabled=False)
    caps = resolve_capabilities(flags, RoomRole.PATIENT)

    assert is_room_disabled(flags) is False
    assert caps.audio.enabled is True
    assert caps.video.enabled is False
    assert caps.video.reason == CapabilityReason.DISABLED_BY_ADMIN


def test_each_flag_gates_one_capability():
    caps = resolve_capabilities(all_on(live_chat_enabled=False, vitals_panel_enabled=False), RoomRole.DOCTOR)

    assert caps.chat.enabled is False
    assert caps.chat.placeholder
    assert caps.vitals_panel.enabled is False
    assert caps.attachments.enabled is True
    assert caps.prescriptions.enabled is True


def test_prescriptions_are_for_doctors_only():
    patient_caps = resolve_capabilities(all_on(), RoomRole.PATIENT)
    admin_caps = resolve_capabilities(all_on(), RoomRole.ADMIN)

    assert patient_caps.prescriptions.enabled is False
    assert patient_caps.prescriptions.reason == CapabilityReason.NOT_AVAILABLE_FOR_ROLE
    assert patient_caps.attachments.enabled is True
    assert admin_caps.attachments.enabled is False


def test_default_flags_open_an_audio_room():
    caps = resolve_capabilities(RoomFlags(), RoomRole.DOCTOR)

    assert caps.room_disabled is False
    assert caps.audio.enabled is True
    assert caps.video.enabled is False


def make_entry():
    return SimpleNamespace(doctor_id=uuid4(), patient_id=uuid4())


def make_user(user_id, role):
    return SimpleNamespace(id=user_id, role=role)


def test_resolve_role_for_participants():
    entry = make_entry()
    flags = all_on()

    assert resolve_role(make_user(entry.doctor_id, UserRole.DOCTOR), entry, flags) == RoomRole.DOCTOR
    assert resolve_role(make_user(entry.patient_id, UserRole.PATIENT), entry, flags) == RoomRole.PATIENT
    assert resolve_role(make_user(uuid4(), UserRole.ADMIN), entry, flags) == RoomRole.ADMIN


def test_admin_denied_when_admin_join_off():
    entry = make_entry()
    with pytest.raises(AuthorizationError):
        resolve_role(make_user(uuid4(), UserRole.ADMIN), entry, all_on(admin_join_enabled=False))


def test_outsiders_denied_regardless_of_flags():
    entry = make_entry()
    with pytest.raises(AuthorizationError):
        resolve_role(make_user(uuid4(), UserRole.DOCTOR), entry, all_on())
    with pytest.raises(AuthorizationError):
        resolve_role(make_user(uuid4(), UserRole.PATIENT), entry, all_on())
