from PySide6.QtCore import QObject
import configparser
import logging
import os

from quadfit.core.warp import (
    DEFAULT_OPACITY,
    DEFAULT_SUBDIVISIONS,
    CompositeMode,
    WarpConfig,
)

logger = logging.getLogger(__name__)

MAX_SUBDIVISIONS = 16


class SettingsController(QObject):
    """Manages application settings persistence."""

    DEFAULT_WARP_SETTINGS = {
        "opacity": DEFAULT_OPACITY,
        "composite_mode": CompositeMode.NORMAL,
        "subdivisions": DEFAULT_SUBDIVISIONS,
        "show_handles": True,
    }

    def __init__(self, path='settings.ini'):
        super().__init__()
        self.path = path
        self.config = configparser.ConfigParser()
        self.config.read(self.path)
        if not self.config.has_section('General'):
            self.config.add_section('General')
        self.last_directory = self.config.get('General', 'last_directory', fallback=os.path.expanduser("~"))

        if not self.config.has_section('Warp'):
            self.config.add_section('Warp')
        self.warp_opacity = self._get_warp_float(
            'opacity', self.DEFAULT_WARP_SETTINGS["opacity"]
        )
        raw_mode = self.config.get(
            'Warp',
            'composite_mode',
            fallback=self.DEFAULT_WARP_SETTINGS["composite_mode"].value,
        )
        try:
            self.warp_composite_mode = CompositeMode.parse(raw_mode)
        except ValueError:
            logger.warning("Ignoring unknown composite mode %r in %s", raw_mode, self.path)
            self.warp_composite_mode = self.DEFAULT_WARP_SETTINGS["composite_mode"]
        self.warp_subdivisions = self._get_warp_int(
            'subdivisions', self.DEFAULT_WARP_SETTINGS["subdivisions"]
        )
        self.warp_show_handles = self._get_warp_bool(
            'show_handles', self.DEFAULT_WARP_SETTINGS["show_handles"]
        )
        self._sync_warp_settings_to_config()

    def warp_config(self) -> WarpConfig:
        return WarpConfig(
            opacity=self.warp_opacity,
            composite_mode=self.warp_composite_mode,
            subdivisions=self.warp_subdivisions,
            show_handles=self.warp_show_handles,
        )

    def update_warp_config(self, config: WarpConfig):
        self.warp_opacity = config.opacity
        self.warp_composite_mode = config.composite_mode
        self.warp_subdivisions = min(MAX_SUBDIVISIONS, config.subdivisions)
        self.warp_show_handles = config.show_handles
        self._sync_warp_settings_to_config()

    def save_settings(self):
        """Persist settings to disk."""
        self.config.set('General', 'last_directory', self.last_directory)
        self._sync_warp_settings_to_config()
        try:
            with open(self.path, 'w') as configfile:
                self.config.write(configfile)
        except OSError as e:
            logger.error("Could not write settings to %s: %s", self.path, e)
            return False
        return True

    def _get_warp_float(self, option, fallback):
        try:
            value = self.config.getfloat('Warp', option)
        except (configparser.NoOptionError, ValueError):
            return fallback
        return max(0.0, min(1.0, value))

    def _get_warp_int(self, option, fallback):
        try:
            return max(1, min(MAX_SUBDIVISIONS, self.config.getint('Warp', option)))
        except (configparser.NoOptionError, ValueError):
            return fallback

    def _get_warp_bool(self, option, fallback):
        try:
            return self.config.getboolean('Warp', option)
        except (configparser.NoOptionError, ValueError):
            return fallback

    def _sync_warp_settings_to_config(self):
        if not self.config.has_section('Warp'):
            self.config.add_section('Warp')
        self.config.set('Warp', 'opacity', f"{self.warp_opacity:g}")
        self.config.set('Warp', 'composite_mode', self.warp_composite_mode.value)
        self.config.set('Warp', 'subdivisions', str(int(self.warp_subdivisions)))
        self.config.set('Warp', 'show_handles', str(bool(self.warp_show_handles)))
