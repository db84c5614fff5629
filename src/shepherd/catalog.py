# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/shepherd/catalog.py

from __future__ import annotations

from typing import Dict, List

from .registry import Registry
from .resources.bundle import Artifact, Bundle, Precondition
from .resources.config_file import ConfigFile
from .resources.git import GitCheckout
from .resources.package import AptDistUpgrade, Package
from .resources.service import MountUnit, ServiceUnit, UnitScope
from .resources.tarball import Tarball


DEFAULT_ROLE_PACKAGES: Dict[str, List[str]] = {
    "debian": [
        "apt-dist-upgrade",
        "etckeeper",
        "joe",
        "emacs",
        "apt-file",
        "tig",
        "byobu",
        "fish",
    ],
    "torrent": ["openvpn", "apache2", "aria2"],
    "wifi": ["wavemon"],
    "slideshow": ["slideshow"],
    "slideshow_server": ["syncthing"],
    "no_ip": ["inadyn-config"],
    "sdrip": ["sdrip"],
}

PLAIN_PACKAGES = [
    "etckeeper",
    "joe",
    "emacs",
    "tig",
    "byobu",
    "fish",
    "wavemon",
    "lightdm",
    "awesome",
    "unclutter",
    "davfs2",
    "avahi-utils",
    "autoconf",
    "libconfuse-dev",
    "libgnutls28-dev",
    "openvpn",
    "apache2",
    "aria2",
]

OPENJDK_URL = (
    "https://download.bell-sw.com/java/17.0.1+12/"
    "bellsoft-jdk17.0.1+12-linux-arm32-vfp-hflt.tar.gz"
)


def sdrip_bundle() -> Bundle:
    return Bundle(
        "sdrip",
        dependencies=["avahi-utils"],
        preconditions=[
            Precondition("sdrip", "Please link sdrip project folder"),
            Precondition("sdrip/out/main/raspi/sdrip", "Please compile sdrip"),
        ],
        artifacts=[
            Artifact("sdrip/public/*", "{home}/sdrip/public", mode="400", glob=True),
            Artifact("sdrip/out/main/raspi/sdrip", "{home}/sdrip/sdrip", mode="700"),
            Artifact(
                "sdrip/source/deployment/sites/{hostname}/settings.yaml",
                "{home}/sdrip/settings.yaml",
                mode="400",
            ),
        ],
        services=[
            ServiceUnit(
                "sdrip",
                "sdrip/source/deployment/systemd/sdrip.service",
                scope=UnitScope.USER,
            ),
        ],
    )


def slideshow_bundle() -> Bundle:
    user_units = "slideshow/src/deployment/.config/systemd/user"
    return Bundle(
        "slideshow",
        dependencies=["lightdm", "awesome", "unclutter", "davfs2", "openjdk"],
        preconditions=[
            Precondition("slideshow", "Please link slideshow to project folder"),
            Precondition("slideshow/build/libs/slideshow-all.jar", "Please build slideshow"),
        ],
        artifacts=[
            Artifact(
                "slideshow/build/libs/slideshow-all.jar",
                "{home}/slideshow-all.jar",
                marker="{home}/slideshow-all.jar-updated",
            ),
            Artifact(
                "slideshow/src/deployment/.config/slideshow/{hostname}.properties.gpg",
                "{home}/.config/slideshow/slideshow.properties",
                encrypted=True,
            ),
            Artifact(
                "slideshow/src/deployment/.config/awesome/{hostname}.rc.lua",
                "{home}/.config/awesome/rc.lua",
            ),
        ],
        services=[
            MountUnit(
                "home-pi-Slideshow.mount",
                "slideshow/src/deployment/etc/systemd/system/home-pi-Slideshow.mount",
                peer_role="slideshow_server",
                comment=(
                    "Enter your credentials into /etc/davfs2/secret on {hostname}. "
                    'e.g. /home/pi/Slideshow "username" "password"'
                ),
            ),
            ServiceUnit("slideshow", f"{user_units}/slideshow.service", scope=UnitScope.USER),
            ServiceUnit(
                "slideshow-watcher.service",
                f"{user_units}/slideshow-watcher.service",
                scope=UnitScope.USER,
                restart=False,
                enable=False,
            ),
            ServiceUnit(
                "slideshow-watcher.path",
                f"{user_units}/slideshow-watcher.path",
                scope=UnitScope.USER,
            ),
        ],
    )


def build_registry() -> Registry:
    """
    The stock resource catalog. Raises on duplicate names or broken
    dependency declarations before any host is touched.
    """
    registry = Registry()
    for name in PLAIN_PACKAGES:
        registry.register(Package(name))

    (
        registry
        .register(Package("apt-file", post_apply_commands=["apt-file update"]))
        .register(
            Package(
                "syncthing",
                post_apply_commands=[
                    "systemctl --user enable syncthing",
                    "systemctl --user start syncthing",
                ],
                post_apply_sudo=False,
            )
        )
        .register(
            Tarball(
                "openjdk",
                OPENJDK_URL,
                "{home}/bin/jdk",
                post_apply_commands=[
                    "mkdir -p ~/bin",
                    "tar xvf {file} --one-top-level=~/bin",
                    "rm -f ~/bin/jdk",
                    "ln -s ~/bin/jdk-17.0.1 ~/bin/jdk",
                ],
                test="-L",
            )
        )
        .register(
            GitCheckout(
                "inadyn",
                "https://github.com/troglobit/inadyn.git",
                "/usr/local/sbin/inadyn",
                dependencies=["autoconf", "libconfuse-dev", "libgnutls28-dev"],
                post_apply_commands=[
                    "cd {file} && autoreconf -iv && ./configure --with-systemd=/etc/systemd/system"
                    " && make -j && sudo make install",
                    "sudo systemctl enable inadyn.service",
                    "sudo systemctl start inadyn.service",
                ],
                branch="master",
            )
        )
        .register(
            ConfigFile(
                "inadyn-config",
                "/usr/local/etc/inadyn.conf",
                "inadyn.conf.gpg.{location}",
                dependencies=["inadyn"],
            )
        )
        .register(sdrip_bundle())
        .register(slideshow_bundle())
        .register(AptDistUpgrade())
    )

    registry.validate()
    return registry
