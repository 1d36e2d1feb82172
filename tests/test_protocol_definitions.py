#!/usr/bin/env python3
"""
Unit tests for common/protocol_definitions.py

Tests command-line parsing, shell message formatting and transfer framing.
"""

import os
import socket
import struct
import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from common.protocol_definitions import (
    TransferProtocolError, parse_command, split_command_lines, create_greeting_message,
    create_prompt_message, display_path, encode_token, encode_length, recv_exact, recv_token,
    recv_length, send_token, send_length
)


class TestCommandParsing(unittest.TestCase):
    """Test cases for shell line parsing."""

    def test_verb_and_arguments(self):
        command = parse_command('copy src dst\r\n')
        self.assertEqual(command.verb, 'copy')
        self.assertEqual(command.args, ['src', 'dst'])
        self.assertEqual(command.arity, 2)

    def test_extra_whitespace_is_ignored(self):
        command = parse_command('  cd \t docs  \n')
        self.assertEqual((command.verb, command.args), ('cd', ['docs']))

    def test_empty_line(self):
        command = parse_command('\n\r')
        self.assertEqual((command.verb, command.arity), ('', 0))

    def test_split_command_lines(self):
        self.assertEqual(split_command_lines('ls\r\nmkdir a\r\n'), ['ls', 'mkdir a'])
        self.assertEqual(split_command_lines('ls'), ['ls'])

    def test_messages(self):
        self.assertEqual(create_greeting_message('User'), 'Hello, User!\n\r')
        self.assertEqual(create_prompt_message('User', 'server/'), 'User:server/$ ')
        self.assertEqual(display_path('server', '.'), 'server' + os.sep)
        self.assertEqual(display_path('server', 'a'), 'server' + os.sep + 'a' + os.sep)


class TestTransferFraming(unittest.TestCase):
    """Test cases for length-prefixed frames."""

    def setUp(self):
        self.left, self.right = socket.socketpair()

    def tearDown(self):
        self.left.close()
        self.right.close()

    def test_token_layout(self):
        self.assertEqual(encode_token('OK'), b'\x00\x02OK')
        self.assertEqual(encode_token('File found')[:2], struct.pack('>H', 10))

    def test_length_layout(self):
        self.assertEqual(encode_length(1), b'\x00' * 7 + b'\x01')
        self.assertEqual(len(encode_length(2 ** 40)), 8)

    def test_token_and_length_over_socket(self):
        send_token(self.left, 'download')
        send_token(self.left, 'dir/ü.txt')
        send_length(self.left, 123456789)
        self.assertEqual(recv_token(self.right), 'download')
        self.assertEqual(recv_token(self.right), 'dir/ü.txt')
        self.assertEqual(recv_length(self.right), 123456789)

    def test_recv_exact_raises_on_early_close(self):
        self.left.sendall(b'abc')
        self.left.close()
        with self.assertRaises(TransferProtocolError):
            recv_exact(self.right, 5)

    def test_token_too_long(self):
        with self.assertRaises(ValueError):
            encode_token('x' * 70000)


if __name__ == '__main__':
    unittest.main()
