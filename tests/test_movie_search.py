"""
Unit tests for movie search functionality.
"""

import unittest
from unittest.mock import patch, MagicMock
import sys
import os
import requests

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from movie_search import (
    search_movies,
    fetch_movie,
    fetch_movies,
    SearchResponse,
    MISSING_KEY_ERROR,
    MALFORMED_RESPONSE_ERROR,
)
from utils import NO_POSTER, OMDB_URL


def mock_json_response(payload):
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = payload
    return response


SEARCH_PAYLOAD = {
    "Search": [
        {"Title": "Jaws", "Year": "1975", "imdbID": "tt0073195", "Type": "movie",
         "Poster": "https://m.media-amazon.com/jaws.jpg"},
        {"Title": "Jaws 2", "Year": "1978", "imdbID": "tt0077766", "Type": "movie", "Poster": "N/A"},
    ],
    "totalResults": "2",
    "Response": "True",
}


class TestSearchMovies(unittest.TestCase):

    @patch('movie_search.requests.get')
    def test_successful_search(self, mock_get):
        """Test OMDb search items are mapped to movie records."""
        mock_get.return_value = mock_json_response(SEARCH_PAYLOAD)

        response = search_movies("jaws", api_key="fake_api_key")

        self.assertTrue(response.ok)
        self.assertEqual([m.imdb_id for m in response.movies], ["tt0073195", "tt0077766"])
        self.assertEqual(response.movies[0].title, "Jaws")
        self.assertEqual(response.movies[0].year, "1975")
        self.assertTrue(response.movies[0].has_poster)
        self.assertEqual(response.movies[1].poster_url, NO_POSTER)
        self.assertFalse(response.movies[1].has_poster)

        mock_get.assert_called_once()
        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], OMDB_URL)
        self.assertEqual(kwargs["params"], {"s": "jaws", "type": "movie", "apikey": "fake_api_key"})
        self.assertIn("timeout", kwargs)

    @patch('movie_search.requests.get')
    def test_omdb_error_signal(self, mock_get):
        """Test OMDb's Response=False maps to an error with no movies."""
        mock_get.return_value = mock_json_response({"Response": "False", "Error": "Movie not found!"})

        response = search_movies("zzzzzz", api_key="fake_api_key")

        self.assertFalse(response.ok)
        self.assertEqual(response.error, "Movie not found!")
        self.assertEqual(response.movies, ())

    @patch('movie_search.requests.get')
    def test_transport_failure(self, mock_get):
        """Test network errors are reported, not raised."""
        mock_get.side_effect = requests.ConnectionError("Network is unreachable")

        response = search_movies("jaws", api_key="fake_api_key")

        self.assertEqual(response.error, "Network is unreachable")
        self.assertEqual(response.movies, ())

    @patch('movie_search.requests.get')
    def test_timeout(self, mock_get):
        mock_get.side_effect = requests.Timeout()
        response = search_movies("jaws", api_key="fake_api_key")
        self.assertEqual(response.error, "Timeout")

    @patch('movie_search.requests.get')
    def test_malformed_response(self, mock_get):
        """Test non-JSON and unexpected JSON bodies."""
        bad = MagicMock()
        bad.json.side_effect = ValueError("Expecting value")
        cases = [bad, mock_json_response(["not", "a", "dict"]), mock_json_response({"Response": "True"})]

        for case in cases:
            with self.subTest(case=case):
                mock_get.return_value = case
                response = search_movies("jaws", api_key="fake_api_key")
                self.assertEqual(response.error, MALFORMED_RESPONSE_ERROR)

    @patch('movie_search.requests.get')
    def test_items_without_id_skipped(self, mock_get):
        mock_get.return_value = mock_json_response({
            "Search": [{"Title": "No id"}, "junk", {"Title": "Heat", "imdbID": "tt0113277"}],
            "Response": "True",
        })
        response = search_movies("heat", api_key="fake_api_key")
        self.assertEqual([m.imdb_id for m in response.movies], ["tt0113277"])

    @patch('movie_search.requests.get')
    def test_blank_query_skips_request(self, mock_get):
        """Test empty input never hits the network."""
        for query in ["", "   ", None]:
            with self.subTest(query=query):
                response = search_movies(query, api_key="fake_api_key")
                self.assertEqual(response, SearchResponse())
        mock_get.assert_not_called()

    @patch('movie_search.get_omdb_api_key', return_value=None)
    @patch('movie_search.requests.get')
    def test_missing_api_key(self, mock_get, mock_key):
        response = search_movies("jaws")
        self.assertEqual(response.error, MISSING_KEY_ERROR)
        mock_get.assert_not_called()

    @patch('movie_search.get_omdb_api_key', return_value="configured_key")
    @patch('movie_search.requests.get')
    def test_configured_api_key_used(self, mock_get, mock_key):
        mock_get.return_value = mock_json_response(SEARCH_PAYLOAD)
        search_movies("jaws")
        self.assertEqual(mock_get.call_args[1]["params"]["apikey"], "configured_key")


class TestFetchMovie(unittest.TestCase):

    @patch('movie_search.requests.get')
    def test_fetch_single_movie(self, mock_get):
        """Test lookup by IMDb id."""
        mock_get.return_value = mock_json_response({
            "Title": "Alien", "Year": "1979", "imdbID": "tt0078748", "Type": "movie",
            "Poster": "https://img/alien.jpg", "Plot": "In space...", "Response": "True",
        })

        lookup = fetch_movie("tt0078748", api_key="fake_api_key")

        self.assertTrue(lookup.ok)
        self.assertEqual(lookup.movie.title, "Alien")
        self.assertEqual(mock_get.call_args[1]["params"]["i"], "tt0078748")

    @patch('movie_search.requests.get')
    def test_fetch_error(self, mock_get):
        mock_get.return_value = mock_json_response({"Response": "False", "Error": "Incorrect IMDb ID."})

        lookup = fetch_movie("bogus", api_key="fake_api_key")

        self.assertFalse(lookup.ok)
        self.assertEqual(lookup.imdb_id, "bogus")
        self.assertEqual(lookup.error, "Incorrect IMDb ID.")

    @patch('movie_search.requests.get')
    def test_fetch_payload_without_id(self, mock_get):
        mock_get.return_value = mock_json_response({"Title": "Mystery", "Response": "True"})
        lookup = fetch_movie("tt1", api_key="fake_api_key")
        self.assertEqual(lookup.error, MALFORMED_RESPONSE_ERROR)


class TestFetchMovies(unittest.TestCase):

    @patch('movie_search.requests.get')
    def test_results_keep_input_order(self, mock_get):
        """Test results line up with the requested ids, failures included."""
        def fake_get(url, params=None, timeout=None):
            imdb_id = params["i"]
            if imdb_id == "tt_bad":
                return mock_json_response({"Response": "False", "Error": "Incorrect IMDb ID."})
            return mock_json_response({"Title": f"Title {imdb_id}", "imdbID": imdb_id, "Response": "True"})

        mock_get.side_effect = fake_get
        ids = ["tt5", "tt1", "tt_bad", "tt3", "tt2"]

        results = fetch_movies(ids, api_key="fake_api_key")

        self.assertEqual([r.imdb_id for r in results], ids)
        self.assertEqual([r.ok for r in results], [True, True, False, True, True])
        self.assertEqual(results[0].movie.title, "Title tt5")

    def test_empty_input(self):
        self.assertEqual(fetch_movies([], api_key="fake_api_key"), [])


if __name__ == '__main__':
    unittest.main()
