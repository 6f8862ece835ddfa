"""Credsafe Meta information.
   Credsafe keeps named credentials in a single passphrase-encrypted file.
"""
__title__ = 'credsafe'
__description__ = (
   'Credsafe keeps named credentials in a single '
   'passphrase-encrypted file.'
)
__version__ = '0.3.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/credsafe'
