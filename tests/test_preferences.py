from __future__ import annotations

import unittest

from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from luckygroup.models import Base, Preference
from luckygroup.workflows import load_theme, save_theme, toggle_theme


class ThemePreferenceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        self.Session = sessionmaker(
            bind=self.engine, future=True, expire_on_commit=False
        )

    def tearDown(self) -> None:
        self.engine.dispose()

    def test_default_theme_is_light(self) -> None:
        with self.Session() as session:
            self.assertEqual(load_theme(session), "light")

    def test_saved_theme_is_reapplied(self) -> None:
        with self.Session.begin() as session:
            self.assertEqual(save_theme(session, " Dark "), "dark")
        with self.Session() as session:
            self.assertEqual(load_theme(session), "dark")

    def test_toggle_updates_single_row(self) -> None:
        with self.Session.begin() as session:
            self.assertEqual(toggle_theme(session), "dark")
            self.assertEqual(toggle_theme(session), "light")
            count = session.scalar(select(func.count()).select_from(Preference))
            self.assertEqual(count, 1)
            self.assertIsNotNone(session.get(Preference, "theme").updated_at)

    def test_invalid_theme_is_rejected(self) -> None:
        with self.Session() as session:
            with self.assertRaises(ValueError):
                save_theme(session, "sepia")
            with self.assertRaises(TypeError):
                save_theme(session, None)  # type: ignore[arg-type]

    def test_unknown_stored_value_falls_back(self) -> None:
        with self.Session.begin() as session:
            session.add(Preference(key="theme", value="neon"))
        with self.Session() as session:
            self.assertEqual(load_theme(session), "light")

    def test_generic_preference_values(self) -> None:
        with self.Session.begin() as session:
            Preference.set_value(session, "locale", "zh-TW")
            self.assertEqual(Preference.get_value(session, "locale"), "zh-TW")
            self.assertIsNone(Preference.get_value(session, "missing"))


if __name__ == "__main__":
    unittest.main()
