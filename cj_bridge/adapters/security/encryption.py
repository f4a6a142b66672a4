"""설정 테이블에 저장되는 API 키 / 토큰 암호화"""
import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken

from cj_bridge.core.exceptions import CredentialStorageError
from cj_bridge.core.ports.settings_port import EncryptorPort


def derive_fernet_key(secret: str) -> bytes:
    """임의 문자열에서 Fernet 키 생성 (SHA-256 후 urlsafe base64)"""
    key_hash = hashlib.sha256(secret.encode('utf-8')).digest()
    return base64.urlsafe_b64encode(key_hash)


class FernetEncryptor(EncryptorPort):
    """Fernet 기반 암호화"""

    def __init__(self, secret: str):
        self._fernet = Fernet(derive_fernet_key(secret))

    def encrypt(self, plain_text: str) -> str:
        return self._fernet.encrypt(plain_text.encode('utf-8')).decode('utf-8')

    def decrypt(self, cipher_text: str) -> str:
        """복호화 (손상되었거나 다른 키로 암호화된 값은 CredentialStorageError)"""
        try:
            return self._fernet.decrypt(cipher_text.encode('utf-8')).decode('utf-8')
        except (InvalidToken, ValueError) as e:
            raise CredentialStorageError("암호화된 값 복호화 실패") from e
