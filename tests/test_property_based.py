"""Property-based tests using hypothesis."""

import re

from hypothesis import given, settings, strategies as st

from revcord.events import Attachment
from revcord.formatting import IMAGE_HEADER, append_image_links, append_links, defuse_revolt_mentions
from revcord.storage import LogEntryCreate, MemoryStore, SettingsUpdate

_tokens = st.one_of(st.none(), st.text(max_size=20))
_levels = st.one_of(st.none(), st.sampled_from(["error", "warn", "info", "debug"]))


class TestPropertyBased:
    """Property-based tests for invariants."""

    @given(st.lists(st.tuples(_tokens, _tokens, _levels), max_size=10))
    def test_settings_merge_keeps_untouched_fields(self, updates):
        """Property: a field keeps its last explicitly set value."""
        # Arrange
        store = MemoryStore()
        expected = {"discord_token": "", "revolt_token": "", "log_level": "info"}

        # Act
        for discord_token, revolt_token, log_level in updates:
            patch = {
                k: v
                for k, v in (
                    ("discord_token", discord_token),
                    ("revolt_token", revolt_token),
                    ("log_level", log_level),
                )
                if v is not None
            }
            store.update_settings(SettingsUpdate(**patch))
            expected.update(patch)

        # Assert
        settings_ = store.get_settings()
        assert settings_.discord_token == expected["discord_token"]
        assert settings_.revolt_token == expected["revolt_token"]
        assert settings_.log_level == expected["log_level"]

    @settings(max_examples=25, deadline=None)
    @given(st.integers(min_value=0, max_value=1500), st.integers(min_value=1, max_value=1200))
    def test_log_ring_bounded(self, inserts, limit):
        """Property: get_logs never returns more than min(limit, 1000, inserts), newest last."""
        # Arrange
        store = MemoryStore()

        # Act
        for i in range(inserts):
            store.create_log(LogEntryCreate(level="info", message=str(i)))
        logs = store.get_logs(limit)

        # Assert
        assert len(logs) == min(limit, 1000, inserts)
        if logs:
            assert logs[-1].message == str(inserts - 1)
            ids = [e.id for e in logs]
            assert ids == sorted(ids)

    @given(st.text())
    def test_defused_text_never_contains_mass_mention(self, text):
        """Property: no @everyone/@online/@here survives defusing."""
        out = defuse_revolt_mentions(text)

        assert not re.search(r"@(everyone|online|here)\b", out, re.IGNORECASE)

    @given(st.text(), st.lists(st.text(alphabet="abcdef0123456789", min_size=1, max_size=8), max_size=5))
    def test_image_links_listed_in_order(self, content, names):
        """Property: every image URL appears after the header, in input order."""
        images = [Attachment(url=f"https://cdn.example/{n}.png") for n in names]

        out = append_image_links(content, images)

        if not images:
            assert out == content
        else:
            block = out.rsplit(IMAGE_HEADER + "\n", 1)[1]
            assert block.split("\n") == [a.url for a in images]

    @given(st.text(), st.lists(st.text(alphabet="abcdef", min_size=1, max_size=6), max_size=5))
    def test_links_appended_unfiltered(self, content, names):
        """Property: every attachment URL is appended, images or not."""
        attachments = [Attachment(url=f"https://autumn.example/attachments/{n}") for n in names]

        out = append_links(content, attachments)

        assert out.startswith(content)
        for a in attachments:
            assert a.url in out
