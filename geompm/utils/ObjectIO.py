class DictIO:
    @staticmethod
    def GetEssential(dictionary, *arg):
        dictionary = {key.lower() if isinstance(key, str) else key: value for key, value in dictionary.items()}
        for keyword in arg:
            keyword_lower = keyword.lower() if isinstance(keyword, str) else keyword
            if keyword_lower in dictionary:
                return dictionary[keyword_lower]
        raise KeyError(f"KeyError: {arg} is not included in the data dictionary!")

    @staticmethod
    def GetAlternative(dictionary, keyword, default):
        dictionary = {key.lower() if isinstance(key, str) else key: value for key, value in dictionary.items()}
        keyword_lower = keyword.lower() if isinstance(keyword, str) else keyword
        if keyword_lower in dictionary:
            return dictionary[keyword_lower]
        return default

    @staticmethod
    def Contains(dictionary, *arg):
        keys = {key.lower() if isinstance(key, str) else key for key in dictionary}
        return any((keyword.lower() if isinstance(keyword, str) else keyword) in keys for keyword in arg)
