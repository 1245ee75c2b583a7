import os

from launchfetch.models import (
    Authorization,
    ForgeDescriptor,
    LaunchOptions,
    ProxySettings,
    ServerAddress,
    VersionDescriptor,
)
from launchfetch.services import build_game_arguments, jvm_arguments
from launchfetch.services.launch_args import assets_root


def test_legacy_arguments_are_substituted(make_version):
    version = VersionDescriptor.from_dict(make_version())
    options = LaunchOptions(
        root="/games/mc",
        version_number="1.12.2",
        authorization=Authorization(
            access_token="token", name="Steve", uuid="uuid-1"
        ),
    )

    arguments = build_game_arguments(version, options)

    assert arguments == [
        "--username", "Steve",
        "--version", "1.12.2",
        "--gameDir", "/games/mc",
        "--assetsDir", os.path.join("/games/mc", "assets"),
        "--assetIndex", "1.12",
        "--uuid", "uuid-1",
        "--accessToken", "token",
        "--userType", "mojang",
        "--versionType", "release",
    ]


def test_legacy_assets_directory(make_version):
    version = VersionDescriptor.from_dict(make_version(assets="legacy"))
    assert assets_root(version, "/r") == os.path.join("/r", "assets", "legacy")

    version = VersionDescriptor.from_dict(make_version(assets="pre-1.6"))
    assert assets_root(version, "/r") == os.path.join("/r", "assets", "legacy")


def test_structured_arguments_drop_conditionals(make_version):
    data = make_version(
        arguments={
            "game": [
                "--username",
                "${auth_player_name}",
                {"rules": [{"action": "allow"}], "value": "--demo"},
                "--width",
                "854",
            ]
        }
    )
    del data["minecraftArguments"]
    version = VersionDescriptor.from_dict(data)

    arguments = build_game_arguments(
        version, LaunchOptions(root="/r", version_number="1.13")
    )

    assert arguments == ["--username", "Player", "--width", "854"]


def test_forge_arguments_take_precedence(make_version):
    version = VersionDescriptor.from_dict(make_version())
    forge = ForgeDescriptor(
        minecraft_arguments="--username ${auth_player_name} --tweakClass fml"
    )
    options = LaunchOptions(root="/r", version_number="1.12.2")

    assert build_game_arguments(version, options, forge) == [
        "--username", "Player", "--tweakClass", "fml",
    ]
    # Forge 描述没有参数时回退到版本描述
    assert build_game_arguments(version, options, ForgeDescriptor()) == (
        build_game_arguments(version, options)
    )


def test_server_and_proxy_arguments(make_version):
    data = make_version(minecraftArguments="--username ${auth_player_name}")
    version = VersionDescriptor.from_dict(data)
    options = LaunchOptions(
        root="/r",
        version_number="1.12.2",
        server=ServerAddress(host="mc.example.org"),
        proxy=ProxySettings(host="proxy", port="3128", username="u", password="p"),
    )

    assert build_game_arguments(version, options) == [
        "--username", "Player",
        "--server", "mc.example.org", "--port", "25565",
        "--proxyHost", "proxy", "--proxyPort", "3128",
        "--proxyUser", "u", "--proxyPass", "p",
    ]


def test_unknown_placeholder_is_kept(make_version):
    version = VersionDescriptor.from_dict(
        make_version(minecraftArguments="--clientId ${clientid}")
    )
    arguments = build_game_arguments(
        version, LaunchOptions(root="/r", version_number="1.12.2")
    )
    assert arguments == ["--clientId", "${clientid}"]


def test_jvm_arguments():
    assert jvm_arguments("osx") == ["-XstartOnFirstThread"]
    assert jvm_arguments("linux") == ["-Xss1M"]
    assert jvm_arguments("windows")[0].startswith("-XX:HeapDumpPath=")
    assert jvm_arguments("solaris") == []
