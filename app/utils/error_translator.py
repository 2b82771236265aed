"""
エラーメッセージのユーザーフレンドリー化
Design原則: 11. ユーザーの言葉を使う
"""
import re

class ErrorTranslator:
    """
    技術的エラーメッセージをユーザー向けに翻訳
    Design原則: 55. エラー表示は建設的にする
    """

    # エラーパターンと翻訳
    TRANSLATIONS = [
        (r"sox not found",
         "SoX が見つかりません（インストールされているか、PATH が通っているか確認してください）"),

        (r"Source file not found",
         "変換元の音声ファイルが見つかりません"),

        (r"Destination already exists",
         "変換先のファイルが既に存在します（上書きはしません。別名を指定してください）"),

        (r"Conversion failed",
         "音声変換に失敗しました（ファイル形式やエフェクト指定が対応していない可能性があります）"),
    ]

    @classmethod
    def translate(cls, technical_error: str) -> str:
        """
        技術的エラーを翻訳

        Args:
            technical_error: 元のエラーメッセージ

        Returns:
            ユーザー向けエラーメッセージ
        """
        for pattern, translation in cls.TRANSLATIONS:
            if re.search(pattern, technical_error, re.IGNORECASE):
                return translation

        # マッチしない場合は元のメッセージを簡略化
        simplified = technical_error.strip()

        if len(simplified) > 200:
            simplified = simplified[:200] + "..."

        return simplified or "予期しないエラーが発生しました"
