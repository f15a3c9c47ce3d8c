"""默认提示文案的本地化表

仅供默认提示与默认按钮文字使用；调用方提供 send_prompt / button 时完全绕过。
"""

from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_LANGUAGE = "en"


class Translations(BaseModel):
    """单一语言的文案集合"""

    prompt_one: str = Field(description="一个未完成任务时的提示")
    prompt_many: str = Field(description="多个未完成任务时的提示")
    button_label_channel: str = Field(description="频道订阅按钮")
    button_label_bot: str = Field(description="启动 Bot 按钮")

    def prompt_text(self, count: int) -> str:
        """按未完成任务数选择单复数形式"""
        return self.prompt_one if count == 1 else self.prompt_many


def _same(text: str, channel: str, bot: str) -> Translations:
    # 不区分单复数的语言
    return Translations(
        prompt_one=text,
        prompt_many=text,
        button_label_channel=channel,
        button_label_bot=bot,
    )


TRANSLATIONS: dict[str, Translations] = {
    "en": Translations(
        prompt_one="Please complete the task to continue.",
        prompt_many="Please complete the tasks to continue.",
        button_label_channel="Subscribe to channel",
        button_label_bot="Start bot",
    ),
    "ru": Translations(
        prompt_one="Пожалуйста, выполните задание, чтобы продолжить.",
        prompt_many="Пожалуйста, выполните задания, чтобы продолжить.",
        button_label_channel="Подписаться на канал",
        button_label_bot="Запустить бота",
    ),
    "es": Translations(
        prompt_one="Por favor, complete la tarea para continuar.",
        prompt_many="Por favor, complete las tareas para continuar.",
        button_label_channel="Suscribirse al canal",
        button_label_bot="Iniciar bot",
    ),
    "de": Translations(
        prompt_one="Bitte erledigen Sie die Aufgabe, um fortzufahren.",
        prompt_many="Bitte erledigen Sie die Aufgaben, um fortzufahren.",
        button_label_channel="Kanal abonnieren",
        button_label_bot="Bot starten",
    ),
    "fr": Translations(
        prompt_one="Veuillez compléter la tâche pour continuer.",
        prompt_many="Veuillez compléter les tâches pour continuer.",
        button_label_channel="S'abonner à la chaîne",
        button_label_bot="Démarrer le bot",
    ),
    "it": Translations(
        prompt_one="Per favore, completa il compito per continuare.",
        prompt_many="Per favore, completa i compiti per continuare.",
        button_label_channel="Iscriviti al canale",
        button_label_bot="Avvia bot",
    ),
    "pt": Translations(
        prompt_one="Por favor, complete a tarefa para continuar.",
        prompt_many="Por favor, complete as tarefas para continuar.",
        button_label_channel="Inscrever-se no canal",
        button_label_bot="Iniciar bot",
    ),
    "ar": Translations(
        prompt_one="يرجى إكمال المهمة للمتابعة.",
        prompt_many="يرجى إكمال المهام للمتابعة.",
        button_label_channel="الاشتراك في القناة",
        button_label_bot="بدء البوت",
    ),
    "zh": _same("请完成任务以继续。", "订阅频道", "启动机器人"),
    "ja": _same("続行するには、タスクを完了してください。", "チャンネルに登録", "ボットを開始"),
    "ko": _same("계속하려면 작업을 완료하세요.", "채널 구독", "봇 시작"),
    "tr": Translations(
        prompt_one="Devam etmek için görevi tamamlayın.",
        prompt_many="Devam etmek için görevleri tamamlayın.",
        button_label_channel="Kanala abone ol",
        button_label_bot="Botu başlat",
    ),
    # 乌克兰语中 завдання 单复数同形
    "uk": _same(
        "Будь ласка, виконайте завдання, щоб продовжити.",
        "Підписатися на канал",
        "Запустити бота",
    ),
    "pl": Translations(
        prompt_one="Proszę ukończyć zadanie, aby kontynuować.",
        prompt_many="Proszę ukończyć zadania, aby kontynuować.",
        button_label_channel="Subskrybuj kanał",
        button_label_bot="Uruchom bota",
    ),
    "hi": _same("कृपया कार्य पूरा करें ताकि आप जारी रख सकें।", "चैनल सब्सक्राइब करें", "बॉट शुरू करें"),
    "id": _same("Silakan selesaikan tugas untuk melanjutkan.", "Berlangganan saluran", "Mulai bot"),
    "vi": _same("Vui lòng hoàn thành nhiệm vụ để tiếp tục.", "Đăng ký kênh", "Khởi động bot"),
    "th": _same("กรุณาทำงานให้เสร็จเพื่อดำเนินการต่อ", "สมัครสมาชิกช่อง", "เริ่มบอท"),
}

TranslationKey = Literal["prompt_text", "button_label_channel", "button_label_bot"]


def normalize_language(lang_code: str | None) -> str:
    """提取主语言代码：'pt_BR' / 'pt-BR' -> 'pt'，空值 -> 'en'"""
    if not lang_code:
        return DEFAULT_LANGUAGE
    return lang_code.replace("-", "_").split("_")[0].lower()


def get_translation(lang_code: str | None) -> Translations:
    """按语言标签获取文案，未知语言回退到英文"""
    return TRANSLATIONS.get(normalize_language(lang_code), TRANSLATIONS[DEFAULT_LANGUAGE])


def t(key: TranslationKey, lang_code: str | None = None, count: int = 0) -> str:
    """按 key 取单条文案，prompt_text 使用 count 选择单复数"""
    trans = get_translation(lang_code)
    if key == "prompt_text":
        return trans.prompt_text(count)
    return getattr(trans, key)
