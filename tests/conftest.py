import pytest


@pytest.fixture
def class_rows():
    return [
        {"Name": "Bob Jones", "Reading": "Secure", "Notes": "Good progress in phonics"},
        {"Name": "alice  smith", "Reading": "Working towards", "Notes": "Enjoys art"},
        {"Name": "Cara Patel", "Reading": "Greater depth", "Notes": ""},
    ]
