"""Tests for outbound URL construction."""

from gemini_balance.core.target import resolve_target_url

BACKEND = "https://generativelanguage.googleapis.com"


def test_path_and_query_are_appended_verbatim():
    url = resolve_target_url(BACKEND, "/v1beta/models/gemini-pro:generateContent", "alt=sse")
    assert url == (
        "https://generativelanguage.googleapis.com"
        "/v1beta/models/gemini-pro:generateContent?alt=sse"
    )


def test_no_question_mark_without_query():
    assert resolve_target_url(BACKEND, "/v1beta/models", "") == f"{BACKEND}/v1beta/models"


def test_upload_paths_use_the_same_origin():
    url = resolve_target_url(BACKEND, "/upload/v1beta/files", "uploadType=resumable")
    assert url == f"{BACKEND}/upload/v1beta/files?uploadType=resumable"


def test_path_is_not_normalized():
    url = resolve_target_url(BACKEND, "/v1beta//models/../files/", "a=%20b")
    assert url == f"{BACKEND}/v1beta//models/../files/?a=%20b"
