# Copyright (C) 2026 StableLlama
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

from unittest import TestCase

from booknote.utils.video_links import embed_url, get_youtube_id


class YoutubeIdTest(TestCase):
    def test_known_link_shapes(self):
        for url in (
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42",
            "https://youtu.be/dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ?si=abc",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
            "https://www.youtube.com/v/dQw4w9WgXcQ",
            "https://www.youtube.com/shorts/dQw4w9WgXcQ",
            "https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
        ):
            with self.subTest(url=url):
                self.assertEqual(get_youtube_id(url), "dQw4w9WgXcQ")

    def test_rejects_wrong_length_and_other_hosts(self):
        for url in (
            None,
            "",
            "https://youtu.be/short",
            "https://youtu.be/dQw4w9WgXcQxx",
            "https://vimeo.com/123456",
        ):
            with self.subTest(url=url):
                self.assertIsNone(get_youtube_id(url))

    def test_embed_url(self):
        self.assertEqual(
            embed_url("https://youtu.be/dQw4w9WgXcQ"),
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
        )
        self.assertIsNone(embed_url("not a link"))
