"""Tests for storage name generation."""

import uuid

from blob_service.naming import generate_storage_name, original_suffix


def test_keeps_original_extension():
    name = generate_storage_name('report.pdf')

    assert name.endswith('.pdf')
    uuid.UUID(name[: -len('.pdf')])


def test_extension_case_preserved():
    assert generate_storage_name('IMG_01.JPG').endswith('.JPG')


def test_only_last_suffix_kept():
    assert original_suffix('backup.tar.zip') == '.zip'


def test_no_extension():
    name = generate_storage_name('Makefile')

    assert '.' not in name
    uuid.UUID(name)


def test_independent_of_original_name():
    name = generate_storage_name('secret-plans.txt')

    assert 'secret' not in name


def test_names_are_unique():
    names = {generate_storage_name('same.txt') for _ in range(10_000)}

    assert len(names) == 10_000
