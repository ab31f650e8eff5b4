import random
import re
import unittest

from gctet.services.ProfileService.profile_service import ProfileService


class TestProfileService(unittest.TestCase):
    def setUp(self):
        self.service = ProfileService(rng=random.Random(42))

    def test_generate_id_number_format(self):
        for _ in range(50):
            id_number = self.service.generate_id_number()
            self.assertRegex(id_number, r"^GCT-\d{4}$")
            self.assertTrue(1000 <= int(id_number[4:]) <= 9999)

    def test_create_profile(self):
        profile = self.service.create_profile(123, "  Ada  ", city="Lahore", email="")
        self.assertEqual(profile["name"], "Ada")
        self.assertIsNone(profile["profile_pic"])
        self.assertEqual(profile["city"], "Lahore")
        self.assertNotIn("email", profile)
        self.assertTrue(re.match(r"^GCT-\d{4}$", profile["id_number"]))
        self.assertEqual(self.service.get_profile(123), profile)

    def test_create_profile_ignores_blank_details(self):
        profile = self.service.create_profile(5, "Ada", email="   ", city=" Quetta ")
        self.assertNotIn("email", profile)
        self.assertEqual(profile["city"], "Quetta")

    def test_create_profile_blank_name(self):
        with self.assertRaises(ValueError):
            self.service.create_profile(123, "   ")
        self.assertIsNone(self.service.get_profile(123))

    def test_recreate_keeps_id_number_and_picture(self):
        first = self.service.create_profile(123, "Ada")
        self.service.update_picture(123, "data:image/png;base64,QUJD")
        second = self.service.create_profile(123, "Ada Lovelace")
        self.assertEqual(second["id_number"], first["id_number"])
        self.assertEqual(second["profile_pic"], "data:image/png;base64,QUJD")
        self.assertEqual(second["name"], "Ada Lovelace")

    def test_update_picture_without_profile(self):
        self.assertIsNone(self.service.update_picture(123, "data:image/png;base64,QUJD"))

    def test_get_profile_none(self):
        self.assertIsNone(self.service.get_profile(404))

    def test_delete_profile(self):
        self.service.create_profile(123, "Ada")
        self.service.delete_profile(123)
        self.service.delete_profile(999)
        self.assertIsNone(self.service.get_profile(123))


if __name__ == "__main__":
    unittest.main()
