"""Tests for argument vector assembly."""

from __future__ import annotations

from vbox_tools.services.command_builder import build_command, join_command
from vbox_tools.utils.shell_escape import escape_arg


def test_single_string_promoted():
    assert build_command("list") == ["list"]


def test_none_is_empty():
    assert build_command(None) == []


def test_positional_order_kept():
    assert build_command(["snapshot", "vm1", "take", "snap1"]) == [
        "snapshot", "vm1", "take", "snap1",
    ]


def test_tokens_are_escaped():
    assert build_command(["showvminfo", "Ubuntu x64"]) == [
        "showvminfo", escape_arg("Ubuntu x64"),
    ]


def test_true_option_is_bare_flag():
    assert build_command(["guestcontrol", "vm1", "rmdir"], {"force": True})[-1] == "--force"


def test_value_option_appends_escaped_value():
    argv = build_command(["guestcontrol"], {"target-directory": "/tmp"})
    assert argv[-2:] == ["--target-directory", "/tmp"]


def test_value_with_space_escaped():
    argv = build_command(["clonevm", "vm1"], {"name": "my clone"})
    assert argv[-1] == escape_arg("my clone")


def test_false_is_not_omitted():
    argv = build_command(["modifyvm", "vm1"], {"acpi": False})
    assert argv[-2:] == ["--acpi", "false"]


def test_numbers_rendered():
    argv = build_command(["modifyvm", "vm1"], {"memory": 2048, "cpus": 2})
    assert argv[-4:] == ["--memory", "2048", "--cpus", "2"]


def test_options_follow_insertion_order():
    argv = build_command(["startvm", "vm1"], {"type": "headless", "putenv": "A=1", "x": True})
    assert argv[2:] == ["--type", "headless", "--putenv", "A=1", "--x"]


def test_input_list_not_mutated():
    tokens = ["showvminfo", "Ubuntu x64"]
    build_command(tokens, {"machinereadable": True})
    assert tokens == ["showvminfo", "Ubuntu x64"]


def test_join_command():
    assert join_command(["list", "vms"]) == "list vms"
