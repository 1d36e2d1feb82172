#!/usr/bin/env python3
"""
Integration tests for server/files/transfer_server.py

Talks to a live transfer server on a loopback port:
- Upload/download round trip, byte for byte
- Exactly one framed reply per request (FNF, UNKNOWN, WRONG)
- Root containment and short uploads
- The TransferClient helper against the same server
"""

import os
import socket
import tempfile
import time
import unittest
from unittest.mock import patch

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from common.constants import CHUNK_SIZE, TransferTokens
from common.protocol_definitions import recv_token, recv_length, recv_exact, send_token, send_length
from client.files.transfer_client import TransferClient
from server.files.transfer_server import TransferServer
from server.utils.logger import logger


class TestTransferServer(unittest.TestCase):
    """Test cases for the framed transfer protocol."""

    def setUp(self):
        """Start a transfer server on an ephemeral port."""
        self.tmp = tempfile.TemporaryDirectory()
        log_patch = patch.object(logger, 'transfer_log_path', Path(self.tmp.name) / 'logs' / 'transfers.log')
        log_patch.start()
        self.addCleanup(log_patch.stop)

        self.server = TransferServer(root_dir=str(Path(self.tmp.name) / 'server'), host='127.0.0.1', port=0)
        self.server.start()
        self.root = self.server.navigator.root
        self.port = self.server.address[1]
        self.sockets = []

    def tearDown(self):
        for sock in self.sockets:
            sock.close()
        self.server.stop()
        self.tmp.cleanup()

    def connect(self):
        sock = socket.create_connection(('127.0.0.1', self.port), timeout=5)
        self.sockets.append(sock)
        return sock

    def upload(self, sock, name, payload):
        send_token(sock, TransferTokens.UPLOAD)
        send_token(sock, name)
        send_length(sock, len(payload))
        sock.sendall(payload)
        return recv_token(sock)

    def download(self, sock, name):
        send_token(sock, TransferTokens.DOWNLOAD)
        send_token(sock, name)
        status = recv_token(sock)
        if status != TransferTokens.FILE_FOUND:
            return status, None
        size = recv_length(sock)
        return status, recv_exact(sock, size)

    def assert_session_alive(self, sock):
        """The next request still gets its own reply."""
        send_token(sock, TransferTokens.EXIT)
        self.assertEqual(recv_token(sock), TransferTokens.DONE)

    def test_upload_then_download_round_trip(self):
        payload = os.urandom(3 * CHUNK_SIZE + 17)
        sock = self.connect()
        self.assertEqual(self.upload(sock, 'x.bin', payload), TransferTokens.OK)
        self.assertEqual((self.root / 'x.bin').read_bytes(), payload)

        status, data = self.download(sock, 'x.bin')
        self.assertEqual(status, TransferTokens.FILE_FOUND)
        self.assertEqual(data, payload)
        self.assert_session_alive(sock)

    def test_upload_empty_file(self):
        """Test scenario: declared size 0 replies OK immediately."""
        sock = self.connect()
        self.assertEqual(self.upload(sock, 'empty.bin', b''), TransferTokens.OK)
        self.assertEqual((self.root / 'empty.bin').read_bytes(), b'')

    def test_upload_overwrites_existing_file(self):
        (self.root / 'a.txt').write_bytes(b'old content that is longer')
        sock = self.connect()
        self.assertEqual(self.upload(sock, 'a.txt', b'new'), TransferTokens.OK)
        self.assertEqual((self.root / 'a.txt').read_bytes(), b'new')

    def test_download_missing_returns_only_fnf(self):
        """Test that FNF is not followed by a length field or payload."""
        sock = self.connect()
        self.assertEqual(self.download(sock, 'missing.bin'), (TransferTokens.FILE_NOT_FOUND, None))
        self.assert_session_alive(sock)

    def test_download_directory_is_not_found(self):
        (self.root / 'folder').mkdir()
        sock = self.connect()
        self.assertEqual(self.download(sock, 'folder')[0], TransferTokens.FILE_NOT_FOUND)

    def test_unknown_command_gets_reply(self):
        sock = self.connect()
        send_token(sock, 'dance')
        self.assertEqual(recv_token(sock), TransferTokens.UNKNOWN)
        self.assert_session_alive(sock)

    def test_upload_outside_root_is_rejected(self):
        """Test that an escaping name gets WRONG and the payload is still consumed."""
        sock = self.connect()
        self.assertEqual(self.upload(sock, '../evil.bin', b'x' * 1000), TransferTokens.WRONG)
        self.assertFalse((self.root.parent / 'evil.bin').exists())
        self.assert_session_alive(sock)

    def test_download_outside_root_is_not_found(self):
        (self.root.parent / 'secret.txt').write_text('secret')
        sock = self.connect()
        self.assertEqual(self.download(sock, '../secret.txt')[0], TransferTokens.FILE_NOT_FOUND)

    def test_negative_size_is_rejected(self):
        sock = self.connect()
        send_token(sock, TransferTokens.UPLOAD)
        send_token(sock, 'neg.bin')
        send_length(sock, -5)
        self.assertEqual(recv_token(sock), TransferTokens.WRONG)
        self.assert_session_alive(sock)

    def test_short_upload_fails_explicitly(self):
        """Test that a peer closing before the declared size gets WRONG and no file remains."""
        sock = self.connect()
        send_token(sock, TransferTokens.UPLOAD)
        send_token(sock, 'short.bin')
        send_length(sock, 100)
        sock.sendall(b'0123456789')
        sock.shutdown(socket.SHUT_WR)
        self.assertEqual(recv_token(sock), TransferTokens.WRONG)
        self.assertFalse((self.root / 'short.bin').exists())

    def test_exit_closes_connection(self):
        sock = self.connect()
        self.assert_session_alive(sock)
        self.assertEqual(sock.recv(1), b'')

    def test_sessions_are_independent(self):
        first = self.connect()
        second = self.connect()
        self.assertEqual(self.upload(first, 'one.bin', b'1'), TransferTokens.OK)
        self.assertEqual(self.upload(second, 'two.bin', b'22'), TransferTokens.OK)
        self.assert_session_alive(first)
        self.assertEqual(self.download(second, 'one.bin'), (TransferTokens.FILE_FOUND, b'1'))

    def test_transfer_client_round_trip(self):
        local = Path(self.tmp.name) / 'local.bin'
        fetched = Path(self.tmp.name) / 'fetched.bin'
        payload = os.urandom(CHUNK_SIZE + 1)
        local.write_bytes(payload)

        with TransferClient('127.0.0.1', self.port, timeout=5) as client:
            self.assertTrue(client.upload(str(local), 'remote.bin'))
            self.assertTrue(client.download('remote.bin', str(fetched)))
            self.assertFalse(client.download('nope.bin', str(Path(self.tmp.name) / 'nope.bin')))

        self.assertEqual(fetched.read_bytes(), payload)
        self.assertFalse((Path(self.tmp.name) / 'nope.bin').exists())

    def test_transfer_log_written(self):
        sock = self.connect()
        self.upload(sock, 'logged.bin', b'abc')
        self.assert_session_alive(sock)
        log_path = logger.transfer_log_path
        for _ in range(100):
            if log_path.exists():
                break
            time.sleep(0.01)
        self.assertIn('UPLOAD | logged.bin', log_path.read_text(encoding='utf-8'))


if __name__ == '__main__':
    unittest.main()
