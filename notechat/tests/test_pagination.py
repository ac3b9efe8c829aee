from django.test import SimpleTestCase

from notechat.pagination import MAX_PAGE_SIZE, parse_page_params


class ParsePageParamsTest(SimpleTestCase):
    def test_defaults(self):
        self.assertEqual(parse_page_params({}, 50), (1, 50))

    def test_explicit_values(self):
        self.assertEqual(parse_page_params({'page': '3', 'limit': '10'}, 50), (3, 10))

    def test_malformed_values_fall_back(self):
        self.assertEqual(parse_page_params({'page': 'abc', 'limit': '-5'}, 20), (1, 20))
        self.assertEqual(parse_page_params({'page': '0'}, 20), (1, 20))

    def test_limit_is_capped(self):
        self.assertEqual(parse_page_params({'limit': '10000'}, 20), (1, MAX_PAGE_SIZE))
