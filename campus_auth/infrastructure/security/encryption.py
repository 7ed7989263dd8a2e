"""
セッションPIIの決定的暗号化モジュール

メールアドレス・電話番号・セッショントークンをAES-256-CBCで暗号化して保存し、
検索用にはHMAC-SHA256の一方向ハッシュを使う。

注意（セキュリティ上のトレードオフ）:
    IVを乱数ではなく「キー付きハッシュ(平文)」から導出しているため、
    同じ平文は常に同じ暗号文になる。DBを読める攻撃者には同一値の出現パターンが見えるが、
    その代わりに全件復号せずに等価検索ができる。
    ランダムIVに「修正」すると既存データの重複検出・検索が壊れるので変更しないこと。
"""

import hashlib
import hmac
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from campus_auth.core.config import get_settings
from campus_auth.core.logging import get_logger
from campus_auth.domain.exceptions import DecryptionError

logger = get_logger(__name__)

DEVELOPMENT_KEY_SOURCE = "default-development-encryption-key"

KEY_LENGTH = 32
IV_LENGTH = 16
BLOCK_BITS = 128

# 用途ごとにサブキーを分ける（IV導出と検索ハッシュで鍵素材を共有しない）
_IV_CONTEXT = b"campus-auth/iv"
_SEARCH_CONTEXT = b"campus-auth/search"
SEARCH_SALT = b"campus-auth:search-salt:v1:"


def normalize_key(raw_key: str) -> bytes:
    """
    設定値の暗号化キーを32バイトに正規化する

    - 64文字のHEX文字列: そのままデコード
    - 32バイトの文字列: UTF-8バイト列をそのまま使用
    - それ以外: SHA-256で32バイトに圧縮

    Args:
        raw_key: 設定値のキー文字列

    Returns:
        32バイトのキー
    """
    if len(raw_key) == 64:
        try:
            return bytes.fromhex(raw_key)
        except ValueError:
            pass

    encoded = raw_key.encode("utf-8")
    if len(encoded) == KEY_LENGTH:
        return encoded

    return hashlib.sha256(encoded).digest()


def normalize_email(email: str) -> str:
    """検索ハッシュ用のメールアドレス正規化"""
    return email.strip().lower()


class DeterministicCipher:
    """
    決定的暗号化 / 検索ハッシュ

    暗号文の形式は ``"<IV 32桁HEX>:<暗号文HEX>"``。
    検索ハッシュは64桁HEX（":"を含まない）なので、誤って復号に渡しても必ず失敗する。
    """

    def __init__(self, encryption_key: str) -> None:
        """
        Args:
            encryption_key: 暗号化キー（設定値の文字列。normalize_keyで32バイト化）
        """
        if not encryption_key:
            raise ValueError("encryption_key must not be empty")

        self._key = normalize_key(encryption_key)
        self._iv_key = hmac.new(self._key, _IV_CONTEXT, hashlib.sha256).digest()
        self._search_key = hmac.new(
            self._key, _SEARCH_CONTEXT, hashlib.sha256
        ).digest()

    def _derive_iv(self, data: bytes) -> bytes:
        return hmac.new(self._iv_key, data, hashlib.sha256).digest()[:IV_LENGTH]

    def _cipher(self, iv: bytes) -> Cipher:
        return Cipher(algorithms.AES(self._key), modes.CBC(iv))

    def encrypt(self, plaintext: str) -> str:
        """
        平文を暗号化する

        同じ平文・同じキーであれば常に同じ暗号文を返す。

        Args:
            plaintext: 平文（空文字列も可）

        Returns:
            "IV:暗号文" 形式のHEX文字列

        Raises:
            TypeError: 文字列以外が渡された場合
        """
        if not isinstance(plaintext, str):
            raise TypeError("plaintext must be str")

        data = plaintext.encode("utf-8")
        iv = self._derive_iv(data)

        padder = padding.PKCS7(BLOCK_BITS).padder()
        padded = padder.update(data) + padder.finalize()

        encryptor = self._cipher(iv).encryptor()
        encrypted = encryptor.update(padded) + encryptor.finalize()

        return f"{iv.hex()}:{encrypted.hex()}"

    def decrypt(self, ciphertext: str) -> str:
        """
        暗号文を復号する

        Args:
            ciphertext: encrypt()の出力

        Returns:
            平文

        Raises:
            DecryptionError: 形式不正・パディング不正・UTF-8として不正・キー不一致
        """
        try:
            return self._decrypt(ciphertext)
        except DecryptionError as e:
            logger.error(
                f"Decryption failed ({e.message}): "
                f"length={len(ciphertext) if isinstance(ciphertext, str) else 'n/a'}, "
                f"has_separator={isinstance(ciphertext, str) and ':' in ciphertext}"
            )
            raise

    def _decrypt(self, ciphertext: str) -> str:
        if not isinstance(ciphertext, str) or not ciphertext:
            raise DecryptionError("Invalid encrypted data provided")

        parts = ciphertext.split(":")
        if len(parts) != 2:
            raise DecryptionError(
                "Invalid encrypted data format",
                details={"parts": len(parts)},
            )

        iv_hex, body_hex = parts
        if len(iv_hex) != IV_LENGTH * 2:
            raise DecryptionError("Invalid IV length")

        try:
            iv = bytes.fromhex(iv_hex)
            body = bytes.fromhex(body_hex)
        except ValueError:
            raise DecryptionError("Encrypted data is not valid hex")

        if not body or len(body) % (BLOCK_BITS // 8) != 0:
            raise DecryptionError("Invalid encrypted payload length")

        decryptor = self._cipher(iv).decryptor()
        padded = decryptor.update(body) + decryptor.finalize()

        try:
            unpadder = padding.PKCS7(BLOCK_BITS).unpadder()
            data = unpadder.update(padded) + unpadder.finalize()
        except ValueError:
            raise DecryptionError("Invalid padding (wrong key or corrupted data)")

        # IVは平文から決定的に導出されるので、再計算して一致しなければキー違い
        if not hmac.compare_digest(self._derive_iv(data), iv):
            raise DecryptionError("Integrity check failed (wrong key?)")

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            raise DecryptionError("Decrypted data is not valid UTF-8")

    def hash_for_search(self, plaintext: str) -> str:
        """
        検索用の一方向ハッシュ

        復号手段は存在しない。等価検索（インデックス照合）専用。

        Args:
            plaintext: ハッシュ対象

        Returns:
            64桁のHEX文字列
        """
        if not isinstance(plaintext, str):
            raise TypeError("plaintext must be str")
        return hmac.new(
            self._search_key, SEARCH_SALT + plaintext.encode("utf-8"), hashlib.sha256
        ).hexdigest()


# シングルトンインスタンス
_cipher: Optional[DeterministicCipher] = None


def get_cipher() -> DeterministicCipher:
    """
    設定値のキーで構築したDeterministicCipherを取得

    SESSION_ENCRYPTION_KEYが未設定の場合（開発・テスト環境のみ）は
    固定の開発用キーを使う。本番環境では設定検証の段階で起動が止まる。

    Returns:
        DeterministicCipherインスタンス
    """
    global _cipher
    if _cipher is None:
        settings = get_settings()
        key = settings.SESSION_ENCRYPTION_KEY
        if not key:
            logger.warning("Using development encryption key for session data")
            key = DEVELOPMENT_KEY_SOURCE
        _cipher = DeterministicCipher(key)
    return _cipher
