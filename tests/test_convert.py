"""Tests for scalar and list conversion."""

from enum import IntEnum

import pytest

from querybind import ConversionError, UInt, convert_list, convert_scalar
from querybind.convert import is_decodable, zero_value


class Color(IntEnum):
    RED = 1
    GREEN = 2

    @classmethod
    def unmarshal_query(cls, data):
        try:
            return cls[data.upper()]
        except KeyError:
            raise ValueError(f"unknown color: {data}") from None


class TestConvertScalar:
    """Test built-in scalar conversion."""

    def test_str_is_identity(self):
        """Test strings pass through unchanged, commas included."""
        assert convert_scalar(str, "a,b") == "a,b"
        assert convert_scalar(str, "") == ""

    def test_int(self):
        """Test base-10 integers."""
        assert convert_scalar(int, "42") == 42
        assert convert_scalar(int, "-7") == -7

        with pytest.raises(ConversionError, match="invalid value '4.2'"):
            convert_scalar(int, "4.2")
        with pytest.raises(ConversionError):
            convert_scalar(int, "0x10")

    @pytest.mark.parametrize("token", [" 5", "5 ", "1_000", "\t5"])
    def test_int_rejects_padding_and_separators(self, token):
        """Test only plain digit strings are integers."""
        with pytest.raises(ConversionError):
            convert_scalar(int, token)
        with pytest.raises(ConversionError):
            convert_scalar(UInt, token)

    @pytest.mark.parametrize("token", [" 1.5", "1.5 ", "1_0.5"])
    def test_float_rejects_padding_and_separators(self, token):
        """Test floats with padding or separators are rejected."""
        with pytest.raises(ConversionError):
            convert_scalar(float, token)

    def test_uint(self):
        """Test unsigned integers reject negative values."""
        assert convert_scalar(UInt, "5") == 5
        with pytest.raises(ConversionError, match="invalid value '-5'"):
            convert_scalar(UInt, "-5")

    def test_float(self):
        """Test floating point values."""
        assert convert_scalar(float, "1.5") == 1.5
        assert convert_scalar(float, "1e3") == 1000.0
        assert convert_scalar(float, "1") == 1.0

        with pytest.raises(ConversionError, match="invalid value 'str'"):
            convert_scalar(float, "str")

    @pytest.mark.parametrize("token", ["1", "t", "T", "TRUE", "true", "True"])
    def test_bool_true(self, token):
        """Test accepted spellings of true."""
        assert convert_scalar(bool, token) is True

    @pytest.mark.parametrize("token", ["0", "f", "F", "FALSE", "false", "False"])
    def test_bool_false(self, token):
        """Test accepted spellings of false."""
        assert convert_scalar(bool, token) is False

    def test_bool_invalid(self):
        """Test other spellings are rejected."""
        with pytest.raises(ConversionError):
            convert_scalar(bool, "yes")

    def test_conversion_error_details(self):
        """Test the error carries the token and target type."""
        with pytest.raises(ConversionError) as exc_info:
            convert_scalar(int, "abc")
        assert exc_info.value.token == "abc"
        assert exc_info.value.target is int
        assert isinstance(exc_info.value, ValueError)

    def test_unsupported_type(self):
        """Test types without a parser are rejected."""
        with pytest.raises(TypeError, match="Cannot convert"):
            convert_scalar(dict, "x")


class TestCustomDecode:
    """Test types providing unmarshal_query."""

    def test_is_decodable(self):
        """Test the capability check."""
        assert is_decodable(Color)
        assert not is_decodable(int)
        assert not is_decodable(UInt)

    def test_decode(self):
        """Test the type's own decoder is used."""
        assert convert_scalar(Color, "green") is Color.GREEN

    def test_decode_error_message(self):
        """Test the decoder's message is kept."""
        with pytest.raises(ValueError, match="unknown color: blue"):
            convert_scalar(Color, "blue")


class TestConvertList:
    """Test list conversion."""

    def test_split_and_convert(self):
        """Test each token is converted in order."""
        assert convert_list(float, "1,1.1") == [1.0, 1.1]
        assert convert_list(Color, "red,green") == [Color.RED, Color.GREEN]
        assert convert_list(str, "s1") == ["s1"]

    def test_empty_tokens(self):
        """Test empty tokens are converted like others."""
        assert convert_list(str, "a,,b") == ["a", "", "b"]
        with pytest.raises(ConversionError, match="invalid value ''"):
            convert_list(int, "1,2,")

    def test_first_failure_raises(self):
        """Test a bad token fails the whole list."""
        with pytest.raises(ConversionError, match="invalid value 'str'"):
            convert_list(float, "str,1.1")

    def test_custom_delimiter(self):
        """Test splitting on another delimiter."""
        assert convert_list(int, "1;2", delimiter=";") == [1, 2]


class TestZeroValue:
    """Test initial values for untouched fields."""

    def test_builtin_zero_values(self):
        """Test zero values of built-in scalar types."""
        assert zero_value(str) == ""
        assert zero_value(int) == 0
        assert zero_value(UInt) == 0
        assert zero_value(float) == 0.0
        assert zero_value(bool) is False

    def test_unconstructible_type(self):
        """Test types that need arguments start as None."""
        assert zero_value(Color) is None
