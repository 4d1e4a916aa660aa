import io
import urllib.parse
from urllib.parse import urlsplit, parse_qsl, unquote
import qrcode

from constants import AppConstants
from services.entries import Algorithm, Entry, make_entry, split_label
from services.errors import InvalidOtpUri, MissingSecret, UnsupportedOtpType
from utils import normalize_secret, parse_leading_int

ALG_MAP = {'SHA1': Algorithm.SHA1, 'SHA256': Algorithm.SHA256, 'SHA512': Algorithm.SHA512}


def parse_otp_uri(uri: str) -> Entry:
    try:
        p = urlsplit(uri)
        host = p.hostname
    except ValueError as e:
        raise InvalidOtpUri(f"Invalid otpauth URL: {e}") from e
    if p.scheme.lower() != AppConstants.OTP_SCHEME or not host:
        raise InvalidOtpUri("Not an otpauth URL")
    if host != AppConstants.OTP_TYPE_TOTP:
        raise UnsupportedOtpType(f"Only TOTP is supported, got {host!r}")

    params = {k.lower(): v for k, v in parse_qsl(p.query, keep_blank_values=True)}

    label = unquote(p.path[1:])
    issuer, account = split_label(label, params.get("issuer", ""))

    secret = normalize_secret(params.get("secret", ""))
    if not secret:
        raise MissingSecret("Secret not found in URI.")

    algorithm = ALG_MAP.get(params.get("algorithm", "SHA1").upper(), Algorithm.SHA1)

    return make_entry(
        issuer,
        account,
        secret,
        period=parse_leading_int(params.get("period")),
        digits=parse_leading_int(params.get("digits")),
        algorithm=algorithm,
    )


def build_otpauth_uri(entry: Entry) -> str:
    label = urllib.parse.quote(entry.account_name, safe="")
    # the reader splits the path on its first colon; a colon in the issuer
    # leaves it to the issuer parameter
    if entry.label and ":" not in entry.label:
        label = f"{urllib.parse.quote(entry.label, safe='')}:{label}"
    elif ":" in entry.account_name:
        label = f":{label}"
    query = urllib.parse.urlencode({
        "secret": entry.secret,
        "issuer": entry.label,
        "algorithm": Algorithm(entry.algorithm).name,
        "digits": entry.digits,
        "period": entry.period,
    }, quote_via=urllib.parse.quote)
    return f"otpauth://totp/{label}?{query}"


def build_qr_png(entry: Entry) -> bytes:
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(build_otpauth_uri(entry))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
