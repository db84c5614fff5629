# tests/resources/test_service.py
import pytest

from shepherd.errors import PreconditionError
from shepherd.inventory.models import Host, Inventory
from shepherd.registry import Registry
from shepherd.resources.service import ManagedService, MountedService, MountUnit, ServiceUnit, UnitScope

SYSTEM_DEST = "/etc/systemd/system/sdrip.service"
USER_DEST = "/home/pi/.config/systemd/user/sdrip.service"


@pytest.fixture
def unit_file(tmp_path):
    p = tmp_path / "units" / "sdrip.service"
    p.parent.mkdir()
    p.write_text("[Service]\nExecStart=/home/pi/sdrip/sdrip\n")
    return p


def _install(ctx, unit, **kw):
    reg = Registry().register(ManagedService("svc", unit, **kw))
    return reg.install(ctx, "svc")


def test_new_system_unit_is_reloaded_restarted_and_enabled(remote, make_ctx, unit_file):
    unit = ServiceUnit("sdrip", "units/sdrip.service")
    assert _install(make_ctx(remote), unit) is True

    assert remote.files[SYSTEM_DEST] == unit_file.read_bytes()
    assert remote.commands.count("systemctl daemon-reload") == 1
    assert remote.commands.count("systemctl restart sdrip") == 1
    assert remote.commands[-1] == "systemctl enable sdrip"
    assert remote.commands.index("systemctl daemon-reload") < remote.commands.index("systemctl restart sdrip")
    assert remote.sudo_of("systemctl restart sdrip") is True
    assert remote.sudo_of(f"chown root:root {SYSTEM_DEST}") is True
    assert f"chmod 644 {SYSTEM_DEST}" in remote.commands


def test_unchanged_enabled_unit_does_nothing(remote, make_ctx, unit_file):
    unit = ServiceUnit("sdrip", "units/sdrip.service")
    _install(make_ctx(remote), unit)
    remote.calls.clear()

    assert _install(make_ctx(remote), unit) is False
    assert remote.commands == []
    assert remote.uploads == []


def test_unchanged_but_disabled_unit_is_enabled_without_restart(remote, make_ctx, unit_file):
    remote.files[SYSTEM_DEST] = unit_file.read_bytes()
    unit = ServiceUnit("sdrip", "units/sdrip.service")

    assert _install(make_ctx(remote), unit) is False
    assert remote.commands == ["systemctl enable sdrip"]


def test_user_unit_without_restart(remote, make_ctx, unit_file):
    unit = ServiceUnit("sdrip", "units/sdrip.service", scope=UnitScope.USER, restart=False)
    assert _install(make_ctx(remote), unit) is True

    assert USER_DEST in remote.files
    assert f"chown pi:pi {USER_DEST}" in remote.commands
    assert f"chmod 444 {USER_DEST}" in remote.commands
    assert "systemctl --user daemon-reload" in remote.commands
    assert not any("restart" in c for c in remote.commands)
    assert remote.sudo_of("systemctl --user daemon-reload") is False
    assert "systemctl --user enable sdrip" in remote.commands


def test_enable_false_never_queries_state(remote, make_ctx, unit_file):
    unit = ServiceUnit("sdrip", "units/sdrip.service", enable=False)
    _install(make_ctx(remote), unit)
    assert not any("is-enabled" in c for _, c, _ in remote.calls)
    assert "systemctl enable sdrip" not in remote.commands


def test_post_apply_runs_on_change(remote, make_ctx, unit_file):
    unit = ServiceUnit("sdrip", "units/sdrip.service")
    _install(make_ctx(remote), unit, post_apply_commands=["echo {name} changed"])
    assert "echo sdrip changed" in remote.commands


# ---- mount units ----

MOUNT_TEMPLATE = "[Mount]\nWhat=https://{server}/Slideshow\nWhere={home}/Slideshow\n"
MOUNT_DEST = "/etc/systemd/system/home-pi-Slideshow.mount"


@pytest.fixture
def mount_unit(tmp_path):
    (tmp_path / "home-pi-Slideshow.mount").write_text(MOUNT_TEMPLATE)
    return MountUnit(
        "home-pi-Slideshow.mount",
        "home-pi-Slideshow.mount",
        peer_role="slideshow_server",
        comment="Enter your credentials on {hostname}",
    )


def _mount_registry(unit):
    return Registry().register(MountedService("slideshow-mount", unit))


def test_mount_points_at_server_in_same_location(remote, make_ctx, mount_unit, caplog):
    inv = Inventory([
        Host(hostname="nas-elsewhere", roles=["slideshow_server"], location="office"),
        remote.host,
        Host(hostname="nas-home", roles=["slideshow_server"], location="home"),
        Host(hostname="nas-home-2", roles=["slideshow_server"], location="home"),
    ])
    ctx = make_ctx(remote, inventory=inv)

    with caplog.at_level("WARNING", logger="shepherd"):
        assert _mount_registry(mount_unit).install(ctx, "slideshow-mount") is True

    content = remote.files[MOUNT_DEST].decode()
    assert "What=https://nas-home/Slideshow" in content
    assert "Where=/home/pi/Slideshow" in content
    assert "systemctl restart home-pi-Slideshow.mount" in remote.commands
    assert "Enter your credentials on pi1" in caplog.text


def test_mount_without_peer_fails_before_upload(remote, make_ctx, mount_unit):
    inv = Inventory([remote.host, Host(hostname="nas", roles=["slideshow_server"], location="office")])
    with pytest.raises(PreconditionError) as ei:
        _mount_registry(mount_unit).install(make_ctx(remote, inventory=inv), "slideshow-mount")
    assert "slideshow_server" in str(ei.value)
    assert remote.uploads == []
    assert remote.commands == []


def test_missing_unit_file_is_a_precondition_error(remote, make_ctx):
    unit = ServiceUnit("sdrip", "units/sdrip.service")
    with pytest.raises(PreconditionError) as ei:
        _install(make_ctx(remote), unit)
    assert ei.value.resource == "sdrip"
    assert remote.calls == []
